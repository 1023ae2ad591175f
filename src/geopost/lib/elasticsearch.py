"""Post index client over ``AsyncElasticsearch``.

Wraps the two operations the service needs from the index: upserting a
post by id and running a geo-distance or numeric-range query. Hits are
decoded into :class:`~geopost.models.Post` one at a time; documents that
do not fit the post shape are logged and skipped.
"""

import json
import logging

from elastic_transport import ObjectApiResponse
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import IndexWriteError, SearchError
from ..models import Post
from .. import config

logger = logging.getLogger(__name__)

# Explicit mapping for the post collection. ``location`` must be a
# geo_point for geo_distance queries to work.
POST_MAPPING = {
    "properties": {
        "user": {"type": "keyword"},
        "message": {"type": "text"},
        "location": {"type": "geo_point"},
        "url": {"type": "keyword"},
        "type": {"type": "keyword"},
        "face": {"type": "float"},
    }
}

DEFAULT_SIZE = 10


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class GeoRadius(BaseModel):
    """Documents whose ``field`` lies within ``distance`` of a point."""

    field: str = "location"
    lat: float = 0.0
    lon: float = 0.0
    distance: str = Field(
        config.DEFAULT_DISTANCE, description="Distance with unit, e.g. 200km"
    )

    def to_query(self) -> dict:
        return {
            "geo_distance": {
                "distance": self.distance,
                self.field: {"lat": self.lat, "lon": self.lon},
            }
        }


class NumericRange(BaseModel):
    """Documents whose numeric ``field`` is at least ``gte``."""

    field: str
    gte: float

    def to_query(self) -> dict:
        return {"range": {self.field: {"gte": self.gte}}}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def unwrap_es_response(resp) -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``SearchError`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise SearchError("Invalid Elasticsearch response")


def decode_hit(hit) -> Post | None:
    """Decode one search hit into a ``Post``, or ``None`` if it does not fit."""
    if not isinstance(hit, dict):
        logger.warning("Skipping malformed hit of type %s", type(hit).__name__)
        return None
    src = hit.get("_source")
    if not isinstance(src, dict):
        logger.warning("Skipping hit %s without a document body", hit.get("_id"))
        return None
    try:
        return Post.model_validate(src)
    except ValidationError as exc:
        logger.warning(
            "Skipping hit %s that does not match the post shape",
            hit.get("_id"),
            extra={"errors": exc.errors(include_url=False)},
        )
        return None


def decode_hits(data: dict) -> list[Post]:
    posts: list[Post] = []
    for hit in data.get("hits", {}).get("hits", []):
        post = decode_hit(hit)
        if post is not None:
            posts.append(post)
    return posts


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class PostIndex:
    """Read and write access to the post collection.

    ``es`` is an ``AsyncElasticsearch`` client (or any object with async
    ``index``, ``search`` and ``indices.exists/create`` methods).
    """

    def __init__(self, es, index: str | None = None):
        self.es = es
        self.index = index or config.get_post_index()

    async def ensure_index(self) -> bool:
        """Create the post collection with its mapping if it is missing.

        Returns ``True`` when the index was created.
        """
        if await self.es.indices.exists(index=self.index):
            return False
        await self.es.indices.create(index=self.index, mappings=POST_MAPPING)
        logger.info("Created index %s", self.index)
        return True

    async def upsert(self, post_id: str, post: Post) -> None:
        """Insert or replace the document stored under ``post_id``."""
        try:
            await self.es.index(
                index=self.index, id=post_id, document=post.model_dump()
            )
        except Exception as exc:
            logger.exception(
                "Elasticsearch index failed",
                extra={"index": self.index, "post_id": post_id},
            )
            raise IndexWriteError() from exc

    async def query(
        self, q: GeoRadius | NumericRange, size: int = DEFAULT_SIZE
    ) -> list[Post]:
        """Run ``q`` against the post collection and decode matching posts.

        Order follows the index default and callers must not rely on it.
        """
        body = q.to_query()
        try:
            resp = await self.es.search(index=self.index, query=body, size=size)
        except Exception as exc:
            try:
                body_str = json.dumps(body, ensure_ascii=False)
            except Exception:
                body_str = repr(body)

            logger.exception(
                "Elasticsearch search failed",
                extra={"index": self.index, "request_body": body_str},
            )
            raise SearchError() from exc

        return decode_hits(unwrap_es_response(resp))
