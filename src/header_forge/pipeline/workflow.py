"""LangGraph workflow assembly for one prompt: concept -> artifact -> persist."""

from langgraph.graph import END, StateGraph

from header_forge.generation.base import ImageGenerator, TextGenerator
from header_forge.pipeline.nodes import artifact, concept, persist
from header_forge.pipeline.state import UnitState
from header_forge.storage.base import BlobStore


def build_unit_graph(
    *,
    text_generator: TextGenerator,
    image_generator: ImageGenerator,
    blob_store: BlobStore,
    fetch_timeout_s: float = 30.0,
):
    def _concept(state: UnitState) -> UnitState:
        return concept.run(state, text_generator=text_generator)

    def _artifact(state: UnitState) -> UnitState:
        return artifact.run(state, image_generator=image_generator)

    def _persist(state: UnitState) -> UnitState:
        return persist.run(state, blob_store=blob_store, fetch_timeout_s=fetch_timeout_s)

    graph = StateGraph(UnitState)

    graph.add_node("concept", _concept)
    graph.add_node("artifact", _artifact)
    graph.add_node("persist", _persist)

    graph.set_entry_point("concept")
    graph.add_edge("concept", "artifact")
    graph.add_edge("artifact", "persist")
    graph.add_edge("persist", END)

    return graph.compile()
