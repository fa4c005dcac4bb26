"""Text and image generation adapters."""

from __future__ import annotations

from header_forge.config.settings import Settings
from header_forge.generation.base import ImageGenerator, TextGenerator
from header_forge.generation.gemini import GeminiImageGenerator, GeminiTextGenerator
from header_forge.generation.http import GenerationRequestError
from header_forge.generation.openai import OpenAIImageGenerator, OpenAITextGenerator

OPENAI_CONCEPT_MODEL = "gpt-4o-mini"
OPENAI_IMAGE_MODEL = "gpt-image-1"


def build_text_generator(settings: Settings) -> TextGenerator:
    provider = settings.llm_provider.lower().strip()
    if provider == "gemini":
        return GeminiTextGenerator(
            api_key=settings.resolved_gemini_api_key(),
            model=settings.concept_model,
            base_url=settings.llm_base_url,
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            backoff_s=settings.llm_backoff_s,
        )
    if provider == "openai":
        return OpenAITextGenerator(
            api_key=settings.resolved_openai_api_key(),
            model=_openai_model(settings.concept_model, OPENAI_CONCEPT_MODEL),
            base_url=settings.llm_base_url,
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            backoff_s=settings.llm_backoff_s,
        )
    raise RuntimeError(f"Unsupported generation provider: {settings.llm_provider}")


def build_image_generator(settings: Settings) -> ImageGenerator:
    provider = settings.llm_provider.lower().strip()
    if provider == "gemini":
        return GeminiImageGenerator(
            api_key=settings.resolved_gemini_api_key(),
            model=settings.image_model,
            base_url=settings.llm_base_url,
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            backoff_s=settings.llm_backoff_s,
        )
    if provider == "openai":
        return OpenAIImageGenerator(
            api_key=settings.resolved_openai_api_key(),
            model=_openai_model(settings.image_model, OPENAI_IMAGE_MODEL),
            base_url=settings.llm_base_url,
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            backoff_s=settings.llm_backoff_s,
        )
    raise RuntimeError(f"Unsupported generation provider: {settings.llm_provider}")


def _openai_model(configured: str, default: str) -> str:
    # Model defaults target Gemini; fall back when they were left unchanged.
    if not configured or configured.startswith("gemini"):
        return default
    return configured


__all__ = [
    "GeminiImageGenerator",
    "GeminiTextGenerator",
    "GenerationRequestError",
    "ImageGenerator",
    "OpenAIImageGenerator",
    "OpenAITextGenerator",
    "TextGenerator",
    "build_image_generator",
    "build_text_generator",
]
