"""OpenAI adapters using the chat completions and image generation REST APIs."""

from __future__ import annotations

from typing import Any

from header_forge.generation.http import GenerationRequestError, post_json_with_retry

OPENAI_BASE_URL = "https://api.openai.com/v1"


class _OpenAIClient:
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = OPENAI_BASE_URL,
        timeout_s: float = 60.0,
        max_retries: int = 1,
        backoff_s: float = 0.5,
    ) -> None:
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.backoff_s = max(0.0, backoff_s)

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        return post_json_with_retry(
            url=f"{self.base_url}/{path}",
            headers={"Authorization": f"Bearer {self.api_key}"},
            body=body,
            timeout_s=self.timeout_s,
            max_retries=self.max_retries,
            backoff_s=self.backoff_s,
            provider="openai",
        )


class OpenAITextGenerator(_OpenAIClient):
    def generate(self, system_directive: str, user_input: str) -> str:
        response_json = self._post(
            "chat/completions",
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_directive},
                    {"role": "user", "content": user_input},
                ],
            },
        )
        choices = response_json.get("choices", [])
        if not choices:
            raise GenerationRequestError("OpenAI response missing choices")

        content = choices[0].get("message", {}).get("content")
        if isinstance(content, str):
            text = content.strip()
        elif isinstance(content, list):
            text = "".join(
                item["text"]
                for item in content
                if isinstance(item, dict) and isinstance(item.get("text"), str)
            ).strip()
        else:
            text = ""
        if not text:
            raise GenerationRequestError("OpenAI response content is empty")
        return text


class OpenAIImageGenerator(_OpenAIClient):
    def __init__(self, *, size: str = "1536x1024", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.size = size

    def generate(self, prompt: str) -> str | None:
        response_json = self._post(
            "images/generations",
            {"model": self.model, "prompt": prompt, "n": 1, "size": self.size},
        )
        data = response_json.get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        image = data[0]
        if isinstance(image.get("b64_json"), str) and image["b64_json"]:
            return f"data:image/png;base64,{image['b64_json']}"
        if isinstance(image.get("url"), str) and image["url"]:
            return image["url"]
        return None
