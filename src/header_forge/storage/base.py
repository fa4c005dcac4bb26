"""Blob storage interface for persisted images."""

from __future__ import annotations

import uuid
from pathlib import PurePosixPath
from typing import Protocol


class BlobStorageError(RuntimeError):
    """Upload to the blob backend failed."""


class BlobStore(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under a unique variant of ``key`` and return its public URL."""
        ...


def suffixed_key(key: str) -> str:
    """Insert a random suffix before the extension: ``a/b.png`` -> ``a/b-1f2e3d4c5b6a.png``."""
    path = PurePosixPath(key)
    suffix = uuid.uuid4().hex[:12]
    name = f"{path.stem}-{suffix}{path.suffix}" if path.stem else f"{suffix}{path.suffix}"
    return str(path.with_name(name))
