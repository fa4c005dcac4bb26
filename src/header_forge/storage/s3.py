"""S3-compatible public blob storage (AWS S3, Cloudflare R2, MinIO)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from header_forge.storage.base import BlobStorageError, suffixed_key

logger = logging.getLogger(__name__)


class S3BlobStore:
    def __init__(
        self,
        *,
        bucket: str,
        region: str = "eu-central-1",
        endpoint_url: str = "",
        prefix: str = "",
        public_base_url: str = "",
        acl: str = "public-read",
        access_key_id: str = "",
        secret_access_key: str = "",
        client: Any = None,
    ) -> None:
        if not bucket:
            raise ValueError("HEADER_FORGE_S3_BUCKET is required")
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/")
        self.prefix = prefix.strip("/")
        self.public_base_url = public_base_url.rstrip("/")
        self.acl = acl
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
        )

    def put(self, key: str, data: bytes, content_type: str) -> str:
        object_key = suffixed_key(f"{self.prefix}/{key}" if self.prefix else key)
        extra: dict[str, Any] = {"ContentType": content_type}
        if self.acl:
            extra["ACL"] = self.acl
        try:
            self._client.put_object(Bucket=self.bucket, Key=object_key, Body=data, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise BlobStorageError(f"S3 upload failed for {object_key}: {exc}") from exc
        url = self.public_url(object_key)
        logger.info("blob event=stored bucket=%s key=%s bytes=%d", self.bucket, object_key, len(data))
        return url

    def public_url(self, object_key: str) -> str:
        quoted = quote(object_key)
        if self.public_base_url:
            return f"{self.public_base_url}/{quoted}"
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quoted}"
