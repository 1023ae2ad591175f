"""Post ingestion pipeline.

Turns one authenticated submission into an indexed post:

1. Build the post from the submitted fields.
2. Check the media attachment against the media policy.
3. Generate a fresh post id (also the object key).
4. Classify the attachment by file extension.
5. Upload the attachment and publish it.
6. Score faces, for images only.
7. Upsert the post into the index.

Stages run strictly in order and the first failure aborts the request.
Nothing is retried and earlier side effects are not undone: a blob that
was uploaded before a later stage failed stays in the bucket without an
index entry.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from typing import BinaryIO

from pydantic import ValidationError

from ..exceptions import BadInput, MediaRequired
from ..models import Location, MediaKind, Post
from .media import classify

logger = logging.getLogger(__name__)


@dataclass
class MediaUpload:
    """An attachment as received from the client."""

    file_name: str
    stream: BinaryIO
    content_type: str | None = None


def parse_float(value: str | None, default: float = 0.0) -> float:
    """Best-effort float parse; missing, unparsable or non-finite input gives ``default``."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def new_post_id() -> str:
    return str(uuid.uuid4())


class IngestionPipeline:
    """Ingests submissions using injected storage, annotation and index clients."""

    def __init__(self, blob_store, annotator, index, media_required: bool = True):
        self.blob_store = blob_store
        self.annotator = annotator
        self.index = index
        self.media_required = media_required

    async def ingest(
        self,
        user: str,
        message: str | None,
        lat: str | None,
        lon: str | None,
        media: MediaUpload | None = None,
    ) -> str:
        """Run the pipeline and return the id of the indexed post."""
        try:
            post = Post(
                user=user,
                message=message or "",
                location=Location(lat=parse_float(lat), lon=parse_float(lon)),
            )
        except ValidationError as exc:
            raise BadInput("Location is out of range") from exc

        if media is None:
            if self.media_required:
                raise MediaRequired()
            post_id = new_post_id()
            await self.index.upsert(post_id, post)
            logger.info("Indexed post %s without media", post_id)
            return post_id

        post_id = new_post_id()
        post.type = classify(media.file_name).value

        post.url = await self.blob_store.upload(
            media.stream, post_id, media.content_type
        )

        if post.type == MediaKind.IMAGE.value:
            score = await self.annotator.detect_face(self.blob_store.uri(post_id))
            post.face = score if score is not None else 0.0

        await self.index.upsert(post_id, post)
        logger.info("Indexed post %s (%s)", post_id, post.type)
        return post_id
