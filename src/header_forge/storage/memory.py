"""In-memory blob store for tests only."""

from __future__ import annotations

import threading

from header_forge.storage.base import suffixed_key


class InMemoryBlobStore:
    def __init__(self, base_url: str = "memory://blobs") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, data: bytes, content_type: str) -> str:
        object_key = suffixed_key(key)
        with self._lock:
            self.objects[object_key] = (bytes(data), content_type)
        return f"{self.base_url}/{object_key}"
