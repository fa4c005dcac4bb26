"""Blob storage backends and media fetching."""

from __future__ import annotations

from header_forge.config.settings import Settings
from header_forge.storage.base import BlobStorageError, BlobStore, suffixed_key
from header_forge.storage.fetch import MediaFetchError, MediaPayload, fetch_media
from header_forge.storage.memory import InMemoryBlobStore
from header_forge.storage.s3 import S3BlobStore


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.blob_backend == "memory":
        return InMemoryBlobStore()
    return S3BlobStore(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        prefix=settings.s3_prefix,
        public_base_url=settings.s3_public_base_url,
        acl=settings.s3_acl,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


__all__ = [
    "BlobStorageError",
    "BlobStore",
    "InMemoryBlobStore",
    "MediaFetchError",
    "MediaPayload",
    "S3BlobStore",
    "build_blob_store",
    "fetch_media",
    "suffixed_key",
]
