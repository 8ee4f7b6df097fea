from functools import partial
from typing import Optional

from langgraph.graph import END, StateGraph

from tripchat.config import Settings, get_settings
from tripchat.graph.agents import (
    budget_agent,
    chat_agent,
    detect_trip_ready,
    enrich_itinerary,
    extract_slots_agent,
    generate_itinerary,
    resolve_trip,
)
from tripchat.graph.state import TurnState
from tripchat.integrations.chat_backend import ChatBackend, ItineraryGenerator


def _after_chat(state: TurnState) -> str:
    return END if state.error else "detect_trip_ready"


def _after_detect(state: TurnState) -> str:
    return "resolve_trip" if state.trip_ready is not None else END


def _after_generation(state: TurnState) -> str:
    return "enrich_itinerary" if state.itinerary is not None else END


def build_graph(chat_backend: ChatBackend, generator: ItineraryGenerator, settings: Optional[Settings] = None):
    """Compile the per-turn pipeline; collaborators are bound into the nodes that call them."""
    settings = settings or get_settings()
    g = StateGraph(TurnState)

    g.add_node("extract_slots", extract_slots_agent)
    g.add_node("chat_agent", partial(chat_agent, backend=chat_backend))
    g.add_node("detect_trip_ready", detect_trip_ready)
    g.add_node("resolve_trip", partial(resolve_trip, settings=settings))
    g.add_node("generate_itinerary", partial(generate_itinerary, generator=generator, settings=settings))
    g.add_node("enrich_itinerary", enrich_itinerary)  # real hotels/restaurants from the places provider
    g.add_node("budget_agent", budget_agent)

    g.set_entry_point("extract_slots")
    g.add_edge("extract_slots", "chat_agent")
    g.add_conditional_edges("chat_agent", _after_chat, ["detect_trip_ready", END])
    g.add_conditional_edges("detect_trip_ready", _after_detect, ["resolve_trip", END])
    g.add_edge("resolve_trip", "generate_itinerary")
    g.add_conditional_edges("generate_itinerary", _after_generation, ["enrich_itinerary", END])
    g.add_edge("enrich_itinerary", "budget_agent")
    g.add_edge("budget_agent", END)

    return g.compile()
