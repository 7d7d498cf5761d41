"""Blob storage for scenario images (S3-compatible bucket)."""
import asyncio
import logging
from typing import Iterable, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import settings

logger = logging.getLogger(__name__)


class BlobStore:
    """Best-effort deletion of stored blobs."""

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket if bucket is not None else settings.storage_bucket
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.storage_endpoint_url,
                aws_access_key_id=settings.storage_access_key_id,
                aws_secret_access_key=settings.storage_secret_access_key,
                config=Config(signature_version="s3v4"),
                region_name=settings.storage_region,
            )
        return self._client

    def _delete_sync(self, reference: str):
        self._get_client().delete_object(Bucket=self.bucket, Key=reference)

    async def delete(self, reference: Optional[str]):
        """Delete a blob. Failures are logged and swallowed."""
        if not reference:
            return
        if not self.bucket:
            logger.debug(f"No storage bucket configured, keeping {reference}")
            return
        try:
            await asyncio.to_thread(self._delete_sync, reference)
            logger.info(f"Deleted blob {reference}")
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Could not delete blob {reference}: {e}")

    async def delete_many(self, references: Iterable[Optional[str]]):
        for reference in references:
            await self.delete(reference)


def replaced_images(old: dict, changes: dict) -> list:
    """Blob references dropped by a scenario update."""
    removed = []
    new_main = changes.get("main_image")
    if new_main and old.get("main_image") and old["main_image"] != new_main:
        removed.append(old["main_image"])

    old_images = old.get("images") or []
    if old_images and changes.get("images") is not None:
        kept = set(changes["images"])
        removed.extend(image for image in old_images if image not in kept)
    return removed


# Global instance
blob_store = BlobStore()
