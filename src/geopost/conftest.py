"""Shared fakes for the post index, blob store and face annotator."""

import copy
import math
import re

import pytest
from jose import jwt

from .exceptions import AnnotationError, StorageError

EARTH_RADIUS_KM = 6371.0088

TEST_SECRET = "test-secret"
TEST_USER = "alice"

_DISTANCE_UNITS = {"km": 1.0, "m": 0.001, "mi": 1.609344}


def parse_distance_km(distance: str) -> float:
    match = re.fullmatch(r"\s*([0-9.]+)\s*(km|mi|m)\s*", distance)
    if match is None:
        raise ValueError(f"unsupported distance {distance!r}")
    return float(match.group(1)) * _DISTANCE_UNITS[match.group(2)]


def great_circle_km(lat1, lon1, lat2, lon2) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _matches(query: dict | None, doc: dict) -> bool:
    if not query:
        return True
    if "geo_distance" in query:
        clause = dict(query["geo_distance"])
        radius = parse_distance_km(clause.pop("distance"))
        (field, center), = clause.items()
        point = doc.get(field)
        if not isinstance(point, dict):
            return False
        try:
            dist = great_circle_km(center["lat"], center["lon"], point["lat"], point["lon"])
        except (KeyError, TypeError):
            return False
        return dist <= radius
    if "range" in query:
        (field, bounds), = query["range"].items()
        value = doc.get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return value >= bounds["gte"]
    raise ValueError(f"unsupported query {query!r}")


class FakeIndices:
    def __init__(self, es):
        self._es = es
        self.created: list[dict] = []

    async def exists(self, *, index=None, **kwargs):
        return index in self._es.docs

    async def create(self, *, index=None, mappings=None, **kwargs):
        self.created.append({"index": index, "mappings": mappings})
        self._es.docs.setdefault(index, {})
        return {"acknowledged": True}


class InMemoryEs:
    """Async Elasticsearch stand-in that evaluates geo_distance and range queries."""

    def __init__(self, fail_index: bool = False, fail_search: bool = False):
        self.docs: dict[str, dict[str, dict]] = {}
        self.indices = FakeIndices(self)
        self.index_calls: list[dict] = []
        self.search_calls: list[dict] = []
        self.fail_index = fail_index
        self.fail_search = fail_search

    def put(self, index: str, doc_id: str, source) -> None:
        """Store a raw document, bypassing any shape checks."""
        self.docs.setdefault(index, {})[doc_id] = source

    async def index(self, *, index=None, id=None, document=None, **kwargs):
        self.index_calls.append({"index": index, "id": id, "document": document})
        if self.fail_index:
            raise ConnectionError("index unavailable")
        self.put(index, id, copy.deepcopy(document))
        return {"_id": id, "result": "created"}

    async def search(self, *, index=None, query=None, size=10, **kwargs):
        self.search_calls.append({"index": index, "query": query, "size": size})
        if self.fail_search:
            raise ConnectionError("search unavailable")
        hits = []
        for doc_id, source in self.docs.get(index, {}).items():
            if query and not (isinstance(source, dict) and _matches(query, source)):
                continue
            hits.append({"_id": doc_id, "_source": copy.deepcopy(source)})
        return {"hits": {"hits": hits[:size]}}

    async def close(self):
        pass


class FakeBlobStore:
    """Records uploads instead of writing to a bucket."""

    bucket_name = "test-bucket"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: list[dict] = []

    def uri(self, object_key: str) -> str:
        return f"gs://{self.bucket_name}/{object_key}"

    async def upload(self, stream, object_key: str, content_type: str | None = None) -> str:
        if self.fail:
            raise StorageError()
        self.uploads.append(
            {"key": object_key, "data": stream.read(), "content_type": content_type}
        )
        return (
            "https://storage.googleapis.com/download/storage/v1/b/"
            f"{self.bucket_name}/o/{object_key}?alt=media"
        )


class FakeAnnotator:
    """Returns a scripted face score (``None`` means no face)."""

    def __init__(self, score: float | None = None, fail: bool = False):
        self.score = score
        self.fail = fail
        self.calls: list[str] = []

    async def detect_face(self, blob_uri: str) -> float | None:
        self.calls.append(blob_uri)
        if self.fail:
            raise AnnotationError()
        return self.score


def make_token(claims: dict | None = None, secret: str = TEST_SECRET) -> str:
    if claims is None:
        claims = {"username": TEST_USER}
    return jwt.encode(claims, secret, algorithm="HS256")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_es():
    return InMemoryEs()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def annotator():
    return FakeAnnotator(score=0.73)


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    return TEST_SECRET


@pytest.fixture
def auth_headers(jwt_secret):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def app_state(memory_es, blob_store, annotator, jwt_secret, monkeypatch):
    """Attach fakes to ``app.state`` the way the lifespan attaches real clients."""
    from .main import app

    monkeypatch.delenv("MEDIA_REQUIRED", raising=False)
    monkeypatch.setenv("POST_INDEX", "post")
    app.state.es = memory_es
    app.state.blob_store = blob_store
    app.state.annotator = annotator
    yield app
    for name in ("es", "blob_store", "annotator"):
        try:
            delattr(app.state, name)
        except (AttributeError, KeyError):
            pass