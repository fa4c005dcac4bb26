"""Unit processor: one prompt in, one stored artifact out."""

from __future__ import annotations

from typing import Any

from header_forge.errors import UnitProcessingError
from header_forge.generation.base import ImageGenerator, TextGenerator
from header_forge.models import GeneratedArtifact
from header_forge.pipeline.state import initial_state
from header_forge.pipeline.workflow import build_unit_graph
from header_forge.storage.base import BlobStore


class UnitProcessor:
    """Run the concept/artifact/persist graph for a single prompt.

    Any failure surfaces as one ``UnitProcessingError`` subclass tagged with the
    stage that failed. There is no retry here; retry policy belongs to the batch.
    """

    def __init__(
        self,
        *,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        blob_store: BlobStore,
        fetch_timeout_s: float = 30.0,
    ) -> None:
        self.workflow: Any = build_unit_graph(
            text_generator=text_generator,
            image_generator=image_generator,
            blob_store=blob_store,
            fetch_timeout_s=fetch_timeout_s,
        )

    def process(self, prompt: str) -> GeneratedArtifact:
        try:
            result = self.workflow.invoke(initial_state(prompt))
        except UnitProcessingError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise UnitProcessingError(f"Unit pipeline failed: {exc}", prompt=prompt) from exc

        location_url = result.get("location_url")
        if not location_url:
            raise UnitProcessingError("Unit pipeline finished without a location", prompt=prompt)
        return GeneratedArtifact(source_prompt=prompt, location_url=location_url)
