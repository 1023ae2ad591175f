"""Blob storage for post media on Google Cloud Storage.

Uploads are two-phase: :meth:`BlobStore.write` copies the stream into a
new object, then :meth:`BlobStore.publish` grants public read and fetches
the media link. Between the two calls the object exists but is not yet
publicly readable. A failure in either phase can leave a private object
behind; nothing is rolled back.

The storage SDK is blocking, so the async entry points hand the work to
the threadpool.
"""

import logging
from typing import BinaryIO

from fastapi.concurrency import run_in_threadpool
from google.cloud import storage

from ..exceptions import StorageError

logger = logging.getLogger(__name__)


class BlobStore:
    """Writes post media into a single bucket under opaque object keys."""

    def __init__(self, client: storage.Client, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    def uri(self, object_key: str) -> str:
        """``gs://`` address of an object, as understood by Cloud Vision."""
        return f"gs://{self.bucket_name}/{object_key}"

    def _write(self, stream: BinaryIO, object_key: str, content_type: str | None):
        bucket = self.client.bucket(self.bucket_name)
        # Fails with NotFound when the bucket is missing or not visible.
        bucket.reload()
        blob = bucket.blob(object_key)
        blob.upload_from_file(stream, content_type=content_type, rewind=True)
        return blob

    def _publish(self, object_key: str) -> str:
        blob = self.client.bucket(self.bucket_name).blob(object_key)
        blob.make_public()
        blob.reload()
        return blob.media_link

    async def write(
        self, stream: BinaryIO, object_key: str, content_type: str | None = None
    ) -> None:
        try:
            await run_in_threadpool(self._write, stream, object_key, content_type)
        except Exception as exc:
            logger.exception(
                "Failed to write object",
                extra={"bucket": self.bucket_name, "object_key": object_key},
            )
            raise StorageError() from exc

    async def publish(self, object_key: str) -> str:
        """Grant public read on an object and return its media link."""
        try:
            media_link = await run_in_threadpool(self._publish, object_key)
        except Exception as exc:
            logger.exception(
                "Failed to publish object",
                extra={"bucket": self.bucket_name, "object_key": object_key},
            )
            raise StorageError() from exc
        logger.info("Image is saved to GCS: %s", media_link)
        return media_link

    async def upload(
        self, stream: BinaryIO, object_key: str, content_type: str | None = None
    ) -> str:
        await self.write(stream, object_key, content_type)
        return await self.publish(object_key)
