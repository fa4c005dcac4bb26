from __future__ import annotations

import io
import json
from typing import Any
from urllib import error

import pytest

import header_forge.generation.gemini as gemini_module
import header_forge.generation.http as http_module
import header_forge.generation.openai as openai_module
from header_forge.config.settings import Settings
from header_forge.generation import (
    GeminiImageGenerator,
    GeminiTextGenerator,
    GenerationRequestError,
    OpenAIImageGenerator,
    OpenAITextGenerator,
    build_image_generator,
    build_text_generator,
)
from header_forge.generation.prompts import build_image_prompt


def _capture(monkeypatch: pytest.MonkeyPatch, module: Any, response: dict[str, Any]) -> list:
    calls: list[dict[str, Any]] = []

    def fake_post(**kwargs: Any) -> dict[str, Any]:
        calls.append(kwargs)
        return response

    monkeypatch.setattr(module, "post_json_with_retry", fake_post)
    return calls


def test_gemini_text_generator_sends_system_instruction(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(
        monkeypatch,
        gemini_module,
        {"candidates": [{"content": {"parts": [{"text": " A woman resting. "}]}}]},
    )
    generator = GeminiTextGenerator(api_key="k", model="gemini-2.5-flash", max_retries=2)

    assert generator.generate("be a director", "Endometriose und Fatigue") == "A woman resting."

    call = calls[0]
    assert call["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert call["headers"] == {"x-goog-api-key": "k"}
    assert call["body"]["systemInstruction"] == {"parts": [{"text": "be a director"}]}
    assert call["body"]["contents"][0]["parts"][0]["text"] == "Endometriose und Fatigue"
    assert call["max_retries"] == 2


def test_gemini_text_generator_rejects_empty_content(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, gemini_module, {"candidates": [{"content": {"parts": []}}]})
    generator = GeminiTextGenerator(api_key="k", model="gemini-2.5-flash")

    with pytest.raises(GenerationRequestError, match="empty"):
        generator.generate("directive", "title")


def test_gemini_image_generator_returns_data_url(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(
        monkeypatch,
        gemini_module,
        {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "Here is your image"},
                            {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}},
                        ]
                    }
                }
            ]
        },
    )
    generator = GeminiImageGenerator(api_key="k", model="gemini-2.5-flash-image")

    assert generator.generate("prompt") == "data:image/png;base64,iVBORw0KGgo="
    assert calls[0]["body"]["generationConfig"] == {"responseModalities": ["TEXT", "IMAGE"]}


def test_gemini_image_generator_returns_none_without_media(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(
        monkeypatch,
        gemini_module,
        {"candidates": [{"content": {"parts": [{"text": "I cannot draw that."}]}}]},
    )
    generator = GeminiImageGenerator(api_key="k", model="gemini-2.5-flash-image")

    assert generator.generate("prompt") is None


def test_openai_text_generator_parses_chat_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(
        monkeypatch,
        openai_module,
        {"choices": [{"message": {"content": "A doctor smiling at her desk."}}]},
    )
    generator = OpenAITextGenerator(api_key="sk", model="gpt-4o-mini")

    assert generator.generate("directive", "title") == "A doctor smiling at her desk."
    assert calls[0]["url"] == "https://api.openai.com/v1/chat/completions"
    assert calls[0]["headers"] == {"Authorization": "Bearer sk"}
    assert [message["role"] for message in calls[0]["body"]["messages"]] == ["system", "user"]


def test_openai_image_generator_prefers_inline_bytes(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, openai_module, {"data": [{"b64_json": "iVBORw0KGgo="}]})
    generator = OpenAIImageGenerator(api_key="sk", model="gpt-image-1")

    assert generator.generate("prompt") == "data:image/png;base64,iVBORw0KGgo="


def test_openai_image_generator_falls_back_to_url(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, openai_module, {"data": [{"url": "https://cdn.example/image.png"}]})
    generator = OpenAIImageGenerator(api_key="sk", model="dall-e-3")

    assert generator.generate("prompt") == "https://cdn.example/image.png"


def test_adapters_require_api_keys() -> None:
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        GeminiTextGenerator(api_key="", model="gemini-2.5-flash")
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        OpenAIImageGenerator(api_key="", model="gpt-image-1")


def test_build_generators_follow_provider_setting() -> None:
    gemini_settings = Settings(gemini_api_key="g")
    assert isinstance(build_text_generator(gemini_settings), GeminiTextGenerator)
    assert isinstance(build_image_generator(gemini_settings), GeminiImageGenerator)

    openai_settings = Settings(llm_provider="openai", openai_api_key="o")
    text_generator = build_text_generator(openai_settings)
    image_generator = build_image_generator(openai_settings)
    assert isinstance(text_generator, OpenAITextGenerator)
    assert text_generator.model == "gpt-4o-mini"
    assert isinstance(image_generator, OpenAIImageGenerator)
    assert image_generator.model == "gpt-image-1"


def test_image_prompt_interpolates_concept_and_style_constraints() -> None:
    prompt = build_image_prompt("A woman sitting by a window.")

    assert "- Scene: A woman sitting by a window.\n" in prompt
    assert "documentary realism" in prompt
    assert "soft rose, beige, and burgundy" in prompt
    assert prompt.endswith("Never include text or logos")


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def test_post_json_with_retry_retries_then_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    attempts: list[str] = []

    def failing_urlopen(req: Any, timeout: float) -> Any:
        attempts.append(req.full_url)
        raise error.URLError("connection refused")

    monkeypatch.setattr(http_module.request, "urlopen", failing_urlopen)

    with pytest.raises(GenerationRequestError, match="connection refused"):
        http_module.post_json_with_retry(
            url="https://provider.example/v1/generate",
            headers={},
            body={"x": 1},
            timeout_s=1.0,
            max_retries=2,
            backoff_s=0.0,
            provider="test",
        )
    assert len(attempts) == 3


def test_post_json_decodes_json_object(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def fake_urlopen(req: Any, timeout: float) -> _FakeResponse:
        seen["body"] = json.loads(req.data.decode("utf-8"))
        seen["content_type"] = req.get_header("Content-type")
        return _FakeResponse(b'{"ok": true}')

    monkeypatch.setattr(http_module.request, "urlopen", fake_urlopen)

    result = http_module.post_json(
        url="https://provider.example/v1/generate",
        headers={"Authorization": "Bearer t"},
        body={"x": 1},
        timeout_s=1.0,
    )

    assert result == {"ok": True}
    assert seen == {"body": {"x": 1}, "content_type": "application/json"}
