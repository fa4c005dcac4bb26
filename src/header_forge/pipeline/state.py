"""Typed state contract for the per-prompt LangGraph workflow."""

from typing import TypedDict


class UnitState(TypedDict, total=False):
    prompt: str
    concept: str
    media_reference: str
    location_url: str


def initial_state(prompt: str) -> UnitState:
    return {"prompt": prompt}
