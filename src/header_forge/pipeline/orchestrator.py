"""Batch orchestrator: validate, reserve quota once, process units in isolation."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Protocol

from header_forge.errors import InvalidBatch, UnitProcessingError
from header_forge.models import GeneratedArtifact
from header_forge.quota.limiter import RateLimiter

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 10


class Processor(Protocol):
    def process(self, prompt: str) -> GeneratedArtifact: ...


def split_prompts(text: str) -> list[str]:
    """One prompt per non-blank line, surrounding whitespace removed."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class BatchOrchestrator:
    def __init__(
        self,
        *,
        limiter: RateLimiter,
        processor: Processor,
        max_batch_size: int = MAX_BATCH_SIZE,
        unit_max_retries: int = 0,
        unit_retry_backoff_s: float = 0.0,
    ) -> None:
        if not 1 <= max_batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"max_batch_size must be between 1 and {MAX_BATCH_SIZE}")
        self.limiter = limiter
        self.processor = processor
        self.max_batch_size = max_batch_size
        self.unit_max_retries = max(0, unit_max_retries)
        self.unit_retry_backoff_s = max(0.0, unit_retry_backoff_s)

    def remaining_quota(self) -> int:
        return self.limiter.get_remaining()

    def submit_batch(self, prompts: Sequence[str]) -> list[GeneratedArtifact]:
        batch = self._validate(prompts)
        self.limiter.reserve(len(batch))

        total = len(batch)
        logger.info("batch event=start size=%d", total)
        results: list[GeneratedArtifact] = []
        for index, prompt in enumerate(batch, start=1):
            logger.info("batch event=unit_start position=%d/%d prompt=%r", index, total, prompt)
            artifact = self._run_unit(prompt, index=index, total=total)
            if artifact is not None:
                results.append(artifact)

        logger.info(
            "batch event=completed size=%d generated=%d failed=%d",
            total,
            len(results),
            total - len(results),
        )
        return results

    def _validate(self, prompts: Sequence[str]) -> list[str]:
        if isinstance(prompts, (str, bytes)) or not isinstance(prompts, Sequence):
            raise InvalidBatch("Prompts must be a list of strings.")
        if not prompts:
            raise InvalidBatch("Provide at least one prompt.")
        if len(prompts) > self.max_batch_size:
            raise InvalidBatch(
                f"Too many prompts: {len(prompts)} given, at most {self.max_batch_size} "
                "per batch."
            )
        for position, prompt in enumerate(prompts, start=1):
            if not isinstance(prompt, str) or not prompt.strip():
                raise InvalidBatch(f"Prompt {position} is empty.")
        return list(prompts)

    def _run_unit(self, prompt: str, *, index: int, total: int) -> GeneratedArtifact | None:
        for attempt in range(self.unit_max_retries + 1):
            try:
                artifact = self.processor.process(prompt)
            except UnitProcessingError as exc:
                stage = exc.stage
                reason: Exception = exc
            except Exception as exc:  # noqa: BLE001
                stage = "unexpected"
                reason = exc
            else:
                logger.info(
                    "batch event=unit_done position=%d/%d url=%s",
                    index,
                    total,
                    artifact.location_url,
                )
                return artifact

            logger.warning(
                "batch event=unit_failed position=%d/%d attempt=%d/%d stage=%s prompt=%r reason=%s",
                index,
                total,
                attempt + 1,
                self.unit_max_retries + 1,
                stage,
                prompt,
                reason,
            )
            if attempt < self.unit_max_retries and self.unit_retry_backoff_s > 0:
                time.sleep(self.unit_retry_backoff_s)
        return None
