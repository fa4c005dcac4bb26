"""Resolve a media reference (data URL or http URL) into raw bytes."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from urllib import error, parse, request

DEFAULT_CONTENT_TYPE = "image/png"


class MediaFetchError(RuntimeError):
    """The media reference could not be resolved into bytes."""


@dataclass(frozen=True)
class MediaPayload:
    data: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


def fetch_media(reference: str, *, timeout_s: float = 30.0) -> MediaPayload:
    if reference.startswith("data:"):
        return _decode_data_url(reference)

    scheme = parse.urlsplit(reference).scheme.lower()
    if scheme not in {"http", "https"}:
        raise MediaFetchError(f"Unsupported media reference scheme: {scheme or '<none>'}")

    try:
        with request.urlopen(reference, timeout=timeout_s) as response:
            data = response.read()
            content_type = response.headers.get_content_type() if response.headers else ""
    except error.HTTPError as exc:
        raise MediaFetchError(f"Media download failed with status {exc.code}") from exc
    except error.URLError as exc:
        raise MediaFetchError(f"Media download failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise MediaFetchError(f"Media download timed out after {timeout_s:.1f}s") from exc

    if not data:
        raise MediaFetchError("Media download returned no bytes")
    if not content_type.startswith("image/"):
        content_type = DEFAULT_CONTENT_TYPE
    return MediaPayload(data=data, content_type=content_type)


def _decode_data_url(reference: str) -> MediaPayload:
    header, sep, payload = reference.partition(",")
    if not sep:
        raise MediaFetchError("Malformed data URL")
    meta = header[len("data:") :].split(";")
    content_type = meta[0] or DEFAULT_CONTENT_TYPE
    try:
        if "base64" in meta[1:]:
            data = base64.b64decode(payload, validate=True)
        else:
            data = parse.unquote_to_bytes(payload)
    except (ValueError, binascii.Error) as exc:
        raise MediaFetchError("Data URL payload is not valid base64") from exc
    if not data:
        raise MediaFetchError("Data URL carried no bytes")
    return MediaPayload(data=data, content_type=content_type)
