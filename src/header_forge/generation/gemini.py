"""Gemini adapters using the generateContent REST API."""

from __future__ import annotations

from typing import Any

from header_forge.generation.http import GenerationRequestError, post_json_with_retry

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class _GeminiClient:
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = GEMINI_BASE_URL,
        timeout_s: float = 60.0,
        max_retries: int = 1,
        backoff_s: float = 0.5,
    ) -> None:
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.backoff_s = max(0.0, backoff_s)

    def _generate_content(self, body: dict[str, Any]) -> dict[str, Any]:
        return post_json_with_retry(
            url=f"{self.base_url}/models/{self.model}:generateContent",
            headers={"x-goog-api-key": self.api_key},
            body=body,
            timeout_s=self.timeout_s,
            max_retries=self.max_retries,
            backoff_s=self.backoff_s,
            provider="gemini",
        )


class GeminiTextGenerator(_GeminiClient):
    def generate(self, system_directive: str, user_input: str) -> str:
        response_json = self._generate_content(
            {
                "systemInstruction": {"parts": [{"text": system_directive}]},
                "contents": [{"role": "user", "parts": [{"text": user_input}]}],
            }
        )
        text = "".join(
            part["text"]
            for part in _candidate_parts(response_json)
            if isinstance(part.get("text"), str)
        ).strip()
        if not text:
            raise GenerationRequestError("Gemini response content is empty")
        return text


class GeminiImageGenerator(_GeminiClient):
    def generate(self, prompt: str) -> str | None:
        response_json = self._generate_content(
            {
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
            }
        )
        for part in _candidate_parts(response_json):
            inline = part.get("inlineData") or part.get("inline_data")
            if not isinstance(inline, dict):
                continue
            data = inline.get("data")
            if not isinstance(data, str) or not data:
                continue
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            return f"data:{mime_type};base64,{data}"
        return None


def _candidate_parts(response_json: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = response_json.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise GenerationRequestError("Gemini response missing candidates")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return []
    return [part for part in parts if isinstance(part, dict)]
