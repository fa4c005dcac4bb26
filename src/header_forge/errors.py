"""Error taxonomy for batch admission and per-unit processing."""

from __future__ import annotations


class HeaderForgeError(Exception):
    """Base class for all service errors."""


class InvalidBatch(HeaderForgeError):
    """Batch rejected before any side effect (empty, oversized or blank prompts)."""


class QuotaExceeded(HeaderForgeError):
    """Daily quota cannot cover the requested amount."""

    def __init__(self, *, remaining: int, requested: int) -> None:
        self.remaining = max(0, remaining)
        self.requested = requested
        super().__init__(
            f"Daily image limit reached: requested {requested}, "
            f"only {self.remaining} remaining today."
        )


class StoreUnavailable(HeaderForgeError):
    """The quota store could not be reached or returned an error."""


class UnitProcessingError(HeaderForgeError):
    """One prompt failed somewhere in its pipeline; siblings are unaffected."""

    stage = "unit"

    def __init__(self, message: str, *, prompt: str | None = None) -> None:
        self.prompt = prompt
        super().__init__(message)


class ConceptSynthesisError(UnitProcessingError):
    stage = "concept"


class ArtifactSynthesisError(UnitProcessingError):
    stage = "artifact"


class PersistenceError(UnitProcessingError):
    stage = "persist"
