"""Post submission endpoint.

POST /api/v1/post
    Multipart form with ``message``, ``lat``, ``lon`` and an ``image``
    file. Uploads the media, scores faces for images and indexes the post.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from .. import config
from ..exceptions import PostError
from ..lib.elasticsearch import PostIndex
from ..lib.pipeline import IngestionPipeline, MediaUpload
from ..security import CurrentUser

router = APIRouter(prefix=config.API_PREFIX, tags=["posts"])

logger = logging.getLogger(__name__)


class PostCreatedResponse(BaseModel):
    id: str


def get_pipeline(request: Request) -> IngestionPipeline:
    """Build the pipeline from the client handles attached in the app lifespan."""
    state = request.app.state
    return IngestionPipeline(
        blob_store=state.blob_store,
        annotator=state.annotator,
        index=PostIndex(state.es),
        media_required=config.media_required(),
    )


@router.post("/post", response_model=PostCreatedResponse)
async def create_post(
    user: CurrentUser,
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
    message: Annotated[str | None, Form()] = None,
    lat: Annotated[str | None, Form()] = None,
    lon: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> PostCreatedResponse:
    logger.info("Received one post request from %s", user)

    media = None
    if image is not None and image.filename:
        media = MediaUpload(
            file_name=image.filename,
            stream=image.file,
            content_type=image.content_type,
        )

    try:
        post_id = await pipeline.ingest(user, message, lat, lon, media)
    except PostError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    return PostCreatedResponse(id=post_id)
