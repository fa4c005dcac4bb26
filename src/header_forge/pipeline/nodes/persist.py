"""Persist node: download the rendered image and upload it to public storage."""

from __future__ import annotations

import logging

from header_forge.errors import PersistenceError
from header_forge.pipeline.slug import artifact_filename, extension_for
from header_forge.pipeline.state import UnitState
from header_forge.storage.base import BlobStore
from header_forge.storage.fetch import fetch_media

logger = logging.getLogger(__name__)


def run(state: UnitState, *, blob_store: BlobStore, fetch_timeout_s: float) -> UnitState:
    prompt = state["prompt"]
    try:
        media = fetch_media(state["media_reference"], timeout_s=fetch_timeout_s)
    except Exception as exc:  # noqa: BLE001
        raise PersistenceError(f"Fetching the image failed: {exc}", prompt=prompt) from exc

    # The key extension follows the uploaded Content-Type.
    filename = artifact_filename(prompt, extension_for(media.content_type))
    try:
        url = blob_store.put(filename, media.data, media.content_type)
    except Exception as exc:  # noqa: BLE001
        raise PersistenceError(f"Persisting {filename} failed: {exc}", prompt=prompt) from exc

    if not url:
        raise PersistenceError(f"Blob store returned no URL for {filename}", prompt=prompt)
    logger.info("unit event=stored prompt=%r url=%s", prompt, url)
    return {"location_url": url}
