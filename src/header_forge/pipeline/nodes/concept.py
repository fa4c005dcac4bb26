"""Concept node: turn the raw prompt into a short visual scene description."""

from __future__ import annotations

import logging

from header_forge.errors import ConceptSynthesisError
from header_forge.generation.base import TextGenerator
from header_forge.generation.prompts import CONCEPT_SYSTEM_DIRECTIVE
from header_forge.pipeline.state import UnitState

logger = logging.getLogger(__name__)


def run(state: UnitState, *, text_generator: TextGenerator) -> UnitState:
    prompt = state["prompt"]
    try:
        concept = text_generator.generate(CONCEPT_SYSTEM_DIRECTIVE, prompt)
    except Exception as exc:  # noqa: BLE001
        raise ConceptSynthesisError(f"Concept synthesis failed: {exc}", prompt=prompt) from exc

    concept = (concept or "").strip()
    if not concept:
        raise ConceptSynthesisError("Concept synthesis returned empty text", prompt=prompt)

    logger.info("unit event=concept prompt=%r concept=%r", prompt, concept)
    return {"concept": concept}
