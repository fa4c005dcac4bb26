"""Artifact node: render the visual concept into an image reference."""

from __future__ import annotations

from header_forge.errors import ArtifactSynthesisError
from header_forge.generation.base import ImageGenerator
from header_forge.generation.prompts import build_image_prompt
from header_forge.pipeline.state import UnitState


def run(state: UnitState, *, image_generator: ImageGenerator) -> UnitState:
    prompt = state["prompt"]
    try:
        reference = image_generator.generate(build_image_prompt(state["concept"]))
    except Exception as exc:  # noqa: BLE001
        raise ArtifactSynthesisError(f"Image synthesis failed: {exc}", prompt=prompt) from exc

    if not reference:
        raise ArtifactSynthesisError("No valid image reference found in response", prompt=prompt)
    return {"media_reference": reference}
