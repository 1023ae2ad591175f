"""Runtime settings read from the environment.

Values are looked up on every call so tests can patch ``os.environ``
without reloading modules.
"""

import os

API_PREFIX = "/api/v1"

# Radius used by the geo search when the caller does not supply one.
DEFAULT_DISTANCE = "200km"

# Minimum confidence for the cluster search.
CLUSTER_THRESHOLD = 0.9
DEFAULT_CLUSTER_FIELD = "face"


def get_es_url() -> str:
    return os.environ.get("ES_URL", "http://localhost:9200")


def get_es_api_key() -> str | None:
    return os.environ.get("ES_API_KEY")


def get_post_index() -> str:
    return os.environ.get("POST_INDEX", "post")


def get_bucket_name() -> str | None:
    return os.environ.get("GCS_BUCKET")


def get_jwt_secret() -> str | None:
    return os.environ.get("JWT_SECRET")


def media_required() -> bool:
    """Whether every submission must carry a media attachment."""
    value = os.environ.get("MEDIA_REQUIRED", "true")
    return value.strip().lower() not in ("0", "false", "no", "off")


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()
