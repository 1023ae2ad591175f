"""Search endpoints over the post index.

GET /api/v1/search
    Posts within ``range`` kilometres (default 200) of ``lat``/``lon``.

GET /api/v1/cluster
    Posts whose numeric field ``term`` (default ``face``) is at least 0.9.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from .. import config
from ..exceptions import PostError
from ..lib.elasticsearch import DEFAULT_SIZE, PostIndex
from ..lib.gateway import QueryGateway
from ..models import Post
from ..security import require_user

router = APIRouter(
    prefix=config.API_PREFIX, tags=["search"], dependencies=[Depends(require_user)]
)

logger = logging.getLogger(__name__)


def get_gateway(request: Request) -> QueryGateway:
    return QueryGateway(PostIndex(request.app.state.es))


@router.get("/search", response_model=list[Post])
async def search_posts(
    gateway: Annotated[QueryGateway, Depends(get_gateway)],
    lat: str | None = Query(None, description="Latitude of the search center"),
    lon: str | None = Query(None, description="Longitude of the search center"),
    range_km: str | None = Query(
        None, alias="range", description="Search radius in kilometres"
    ),
    size: int = Query(DEFAULT_SIZE, ge=1, le=100),
) -> list[Post]:
    """Return posts located within the requested radius.

    Missing or unparsable coordinates are treated as 0.0; a center outside
    the legal latitude/longitude range is a 400.
    """
    try:
        return await gateway.search_radius(lat, lon, range_km, size=size)
    except PostError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/cluster", response_model=list[Post])
async def cluster_posts(
    gateway: Annotated[QueryGateway, Depends(get_gateway)],
    term: str = Query(
        config.DEFAULT_CLUSTER_FIELD, description="Numeric field to threshold on"
    ),
    size: int = Query(DEFAULT_SIZE, ge=1, le=100),
) -> list[Post]:
    try:
        return await gateway.search_cluster(term, size=size)
    except PostError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
