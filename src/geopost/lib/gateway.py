"""Translates search requests into post index queries."""

import logging

from pydantic import ValidationError

from .. import config
from ..exceptions import BadInput
from ..models import Location, Post
from .elasticsearch import DEFAULT_SIZE, GeoRadius, NumericRange, PostIndex
from .pipeline import parse_float

logger = logging.getLogger(__name__)


def distance_from_range(value: str | None) -> str:
    """Turn a ``range`` request value in kilometres into an index distance.

    Missing, unparsable or non-positive values fall back to the default.
    """
    km = parse_float(value, default=0.0)
    if km <= 0:
        return config.DEFAULT_DISTANCE
    return f"{km}km"


class QueryGateway:
    def __init__(self, index: PostIndex):
        self.index = index

    async def search_radius(
        self,
        lat: str | None,
        lon: str | None,
        range_km: str | None = None,
        size: int = DEFAULT_SIZE,
    ) -> list[Post]:
        """Posts within a radius of the given point (200km by default).

        Raises ``BadInput`` when the center is outside the legal lat/lon range.
        """
        try:
            center = Location(lat=parse_float(lat), lon=parse_float(lon))
        except ValidationError as exc:
            raise BadInput("Location is out of range") from exc
        q = GeoRadius(
            lat=center.lat,
            lon=center.lon,
            distance=distance_from_range(range_km),
        )
        logger.info("Radius search at (%s, %s) within %s", q.lat, q.lon, q.distance)
        return await self.index.query(q, size=size)

    async def search_cluster(
        self,
        field: str = config.DEFAULT_CLUSTER_FIELD,
        size: int = DEFAULT_SIZE,
    ) -> list[Post]:
        """Posts whose ``field`` is at or above the cluster threshold."""
        q = NumericRange(field=field, gte=config.CLUSTER_THRESHOLD)
        return await self.index.query(q, size=size)
