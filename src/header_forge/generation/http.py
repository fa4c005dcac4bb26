"""JSON-over-HTTP helper shared by the provider adapters."""

from __future__ import annotations

import json
import logging
import time
from typing import Any
from urllib import error, request

logger = logging.getLogger(__name__)


class GenerationRequestError(RuntimeError):
    """Transport, HTTP status or decoding failure talking to a provider."""


def post_json_with_retry(
    *,
    url: str,
    headers: dict[str, str],
    body: dict[str, Any],
    timeout_s: float,
    max_retries: int,
    backoff_s: float,
    provider: str,
) -> dict[str, Any]:
    last_error: Exception | None = None
    for attempt in range(max_retries + 1):
        try:
            return post_json(url=url, headers=headers, body=body, timeout_s=timeout_s)
        except GenerationRequestError as exc:
            last_error = exc
            logger.warning(
                "generation request failed provider=%s attempt=%d/%d reason=%s",
                provider,
                attempt + 1,
                max_retries + 1,
                exc,
            )
            if attempt < max_retries and backoff_s > 0:
                time.sleep(backoff_s)

    if last_error is None:
        raise GenerationRequestError(f"{provider} request failed with unknown error")
    raise last_error


def post_json(
    *,
    url: str,
    headers: dict[str, str],
    body: dict[str, Any],
    timeout_s: float,
) -> dict[str, Any]:
    req = request.Request(
        url=url,
        data=json.dumps(body).encode("utf-8"),
        method="POST",
        headers={"Content-Type": "application/json", **headers},
    )
    try:
        with request.urlopen(req, timeout=timeout_s) as response:
            raw = response.read().decode("utf-8")
    except error.HTTPError as exc:
        message = exc.read().decode("utf-8", errors="replace")
        raise GenerationRequestError(
            f"request failed with status {exc.code}: {message[:400]}"
        ) from exc
    except error.URLError as exc:
        raise GenerationRequestError(f"request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise GenerationRequestError(f"request timed out after {timeout_s:.1f}s") from exc

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationRequestError("provider returned non-JSON response") from exc
    if not isinstance(parsed, dict):
        raise GenerationRequestError("provider response must be a JSON object")
    return parsed
