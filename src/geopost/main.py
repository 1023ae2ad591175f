import logging
from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from google.cloud import storage, vision

from . import config
from .lib.annotation import FaceAnnotator
from .lib.elasticsearch import PostIndex
from .lib.storage import BlobStore
from .routers import health, posts, search

logging.basicConfig(level=config.get_log_level())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    bucket_name = config.get_bucket_name()
    if not bucket_name:
        raise RuntimeError("GCS_BUCKET must be set")

    app.state.es = AsyncElasticsearch(
        config.get_es_url(), api_key=config.get_es_api_key()
    )
    app.state.blob_store = BlobStore(storage.Client(), bucket_name)
    app.state.annotator = FaceAnnotator(vision.ImageAnnotatorClient())

    try:
        await PostIndex(app.state.es).ensure_index()
        logger.info("started-service")
        yield
    finally:
        await app.state.es.close()


app = FastAPI(
    title="Geopost API",
    description="An API server for geo-tagged posts with face-scored media",
    version="0.1.0",
    lifespan=lifespan,
)

# Any origin may call the API; browsers send the bearer token in
# the Authorization header.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(health.router)
app.include_router(posts.router)
app.include_router(search.router)


@app.get("/")
async def root():
    return {"message": "Geopost API"}
