"""Errors raised while ingesting or searching posts.

Each error carries the HTTP status the routers answer with, so the
transport layer only needs a single ``except PostError`` per endpoint.
"""


class PostError(Exception):
    """Base class for ingestion and search failures."""

    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class BadInput(PostError):
    status_code = 400
    detail = "Invalid input"


class MediaRequired(PostError):
    status_code = 400
    detail = "Image is not available"


class StorageError(PostError):
    detail = "Failed to save image to storage"


class AnnotationError(PostError):
    detail = "Failed to annotate image"


class IndexWriteError(PostError):
    detail = "Failed to save post to Elasticsearch"


class SearchError(PostError):
    detail = "Failed to read posts from Elasticsearch"
