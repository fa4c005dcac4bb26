"""Pydantic models shared by the pipeline and the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class GeneratedArtifact(BaseModel):
    """One stored image produced from one prompt."""

    source_prompt: str
    location_url: str


class SubmitBatchRequest(BaseModel):
    """Request body for POST /batches.

    Exactly one of an explicit list of prompts or a block of text with one prompt
    per line.
    Size limits are enforced by the orchestrator so the caller gets one consistent
    error message.
    """

    prompts: list[str] | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _require_one_source(self) -> "SubmitBatchRequest":
        if (self.prompts is None) == (self.text is None):
            raise ValueError("Provide exactly one of 'prompts' or 'text'.")
        return self


class ImageItem(BaseModel):
    title: str
    url: str


class SubmitBatchResponse(BaseModel):
    images: list[ImageItem] = Field(default_factory=list)
    requested: int
    generated: int
    remaining: int


class QuotaResponse(BaseModel):
    remaining: int
    daily_limit: int
