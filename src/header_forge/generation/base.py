"""Interfaces for the external text and image generation capabilities."""

from __future__ import annotations

from typing import Protocol


class TextGenerator(Protocol):
    def generate(self, system_directive: str, user_input: str) -> str: ...


class ImageGenerator(Protocol):
    def generate(self, prompt: str) -> str | None:
        """Return a retrievable media reference (data URL or http URL), or None."""
        ...
