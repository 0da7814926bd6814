"""Object storage for ingested documents and transcripts (Google Cloud Storage)."""

import asyncio
import logging
from typing import Optional

from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_TIMEOUT = 15.0
GROUNDING_METADATA_KEY = "grounding"


class StorageError(Exception):
    """Upload to object storage failed."""

    pass


class ObjectStorage:
    """Thin async wrapper over a GCS client.

    The google-cloud-storage client is blocking, so uploads run in a worker
    thread with a timeout.

    Args:
        client: Preconfigured ``storage.Client``; created from ambient
            credentials on first use when omitted.
        timeout: Upload timeout in seconds.
    """

    def __init__(
        self,
        client: Optional[storage.Client] = None,
        timeout: float = DEFAULT_UPLOAD_TIMEOUT,
    ):
        self._client = client
        self.timeout = timeout

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def _upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: Optional[str],
        metadata: Optional[dict[str, str]],
    ) -> None:
        blob = self.client.bucket(bucket).blob(key)
        if metadata:
            blob.metadata = metadata
        blob.upload_from_string(data, content_type=content_type or "application/octet-stream")

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes | str,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None,
        grounding: bool = False,
    ) -> str:
        """Upload ``data`` under ``key`` and return its ``gs://`` locator.

        Args:
            bucket: Bucket name
            key: Object name
            data: Object content; text is encoded as UTF-8
            content_type: MIME type stored with the object
            metadata: Custom metadata
            grounding: Mark the object as reference material for retrieval

        Raises:
            StorageError: No bucket configured, upload failed or timed out
        """
        if not bucket:
            raise StorageError("No storage bucket configured (set GCS_BUCKET_NAME)")

        if isinstance(data, str):
            data = data.encode("utf-8")
            content_type = content_type or "text/plain; charset=utf-8"

        custom = dict(metadata or {})
        if grounding:
            custom[GROUNDING_METADATA_KEY] = "true"

        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._upload, bucket, key, data, content_type, custom),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Upload timed out", extra={"bucket": bucket, "key": key})
            raise StorageError(f"Upload of {key} timed out") from e
        except (gcs_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            logger.error(
                f"Failed to upload file to GCS: {e}",
                extra={"bucket": bucket, "key": key},
            )
            raise StorageError(f"Upload of {key} failed") from e

        uri = f"gs://{bucket}/{key}"
        logger.info(
            "Object uploaded",
            extra={"uri": uri, "bytes": len(data), "grounding": grounding},
        )
        return uri
