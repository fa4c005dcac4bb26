"""Filesystem-safe names derived from prompts."""

from __future__ import annotations

import re

FALLBACK_SLUG = "image"

_SEPARATORS = re.compile(r"[\s_]+")
_DISALLOWED = re.compile(r"[^a-z0-9\-.]")
_REPEATED_HYPHENS = re.compile(r"-+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")


def slugify(text: str) -> str:
    slug = text.lower().strip()
    slug = _SEPARATORS.sub("-", slug)
    slug = _DISALLOWED.sub("", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return _EDGE_HYPHENS.sub("", slug)


def artifact_filename(prompt: str, extension: str = "png") -> str:
    # Prompts made only of punctuation or non-latin text slug to nothing.
    return f"{slugify(prompt) or FALLBACK_SLUG}.{extension}"


_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def extension_for(content_type: str) -> str:
    """File extension for an image MIME type, ``png`` when unknown."""
    mime = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(mime, "png")
