import logging
from typing import Any, Dict

from tripchat.config import Settings
from tripchat.graph.postprocess import (
    enrich_document,
    estimate_trip_cost,
    normalize_duration,
    parse_itinerary_response,
    parse_trip_ready,
    reconcile,
)
from tripchat.graph.slots import extract_slots, merge, missing_fields
from tripchat.graph.state import Phase, TurnState
from tripchat.integrations.chat_backend import ChatBackend, ItineraryGenerator
from tripchat.integrations.exceptions import ChatBackendError, GenerationError

logger = logging.getLogger(__name__)

CONFIRMATION_TEMPLATE = "Perfect! I've got all the details. Let me create your {duration} trip to {destination}! 🎉"
ITINERARY_READY_MESSAGE = "✨ Your personalized itinerary is ready!"
ERROR_MESSAGE = "❌ Sorry, I encountered an error. Please try again."


def _assistant(content: str, kind: str) -> Dict[str, str]:
    return {"role": "assistant", "content": content, "kind": kind}


def extract_slots_agent(state: TurnState) -> Dict[str, Any]:
    candidate = extract_slots(state.message, state.slots)
    slots = merge(state.slots, candidate)
    state.logs.append({
        "stage": "Slots Extracted",
        "message": f"Found {len(candidate.filled())} new trip details",
        "found": candidate.filled(),
        "missing": sorted(missing_fields(slots)),
    })
    return {"slots": slots, "logs": state.logs}


def chat_agent(state: TurnState, backend: ChatBackend) -> Dict[str, Any]:
    try:
        reply = backend.respond(state.message, state.history, state.slots)
    except ChatBackendError as e:
        logger.error("Chat backend failed for %s: %s", state.conversation_id, e)
        reply = None

    if reply is None or not reply.success:
        state.logs.append({"stage": "Chat Failed", "message": "Chat backend returned no usable reply"})
        return {
            "error": "chat_backend",
            "emitted": [_assistant(ERROR_MESSAGE, "error")],
            "logs": state.logs,
        }

    travel_data = state.travel_data
    if reply.travel_data is not None and not reply.travel_data.is_empty():
        travel_data = reply.travel_data
    state.logs.append({
        "stage": "Chat Replied",
        "message": "Assistant replied",
        "hotels": len(travel_data.hotels),
        "restaurants": len(travel_data.restaurants),
    })
    return {"reply": reply.message, "travel_data": travel_data, "logs": state.logs}


def detect_trip_ready(state: TurnState) -> Dict[str, Any]:
    raw = parse_trip_ready(state.reply or "")
    if raw is None:
        # a failed generation is retried by simply chatting on
        phase = Phase.COLLECTING_INFO if state.phase == Phase.GENERATION_FAILED else state.phase
        return {"phase": phase, "emitted": [_assistant(state.reply or "", "reply")]}

    state.logs.append({
        "stage": "Trip Ready",
        "message": "Assistant has enough details to plan the trip",
        "keys": sorted(raw),
    })
    return {"trip_ready": raw, "phase": Phase.READY_TO_GENERATE, "logs": state.logs}


def resolve_trip(state: TurnState, settings: Settings) -> Dict[str, Any]:
    history = state.history + [{"role": "user", "content": state.message}]
    request = reconcile(state.trip_ready, state.slots, history)
    day_count = normalize_duration(request.duration, cap=settings.max_trip_days)

    emitted = []
    if request.confirmed:
        emitted.append(_assistant(
            CONFIRMATION_TEMPLATE.format(duration=request.duration, destination=request.destination),
            "confirmation",
        ))
    else:
        logger.warning("Generating with defaulted fields: %s", sorted(request.defaulted))

    state.logs.append({
        "stage": "Trip Resolved",
        "message": f"{day_count}-day trip to {request.destination}",
        "defaulted": sorted(request.defaulted),
    })
    return {
        "request": request,
        "confirmed": request.confirmed,
        "day_count": day_count,
        "phase": Phase.GENERATING,
        "emitted": state.emitted + emitted,
        "logs": state.logs,
    }


def generate_itinerary(state: TurnState, generator: ItineraryGenerator, settings: Settings) -> Dict[str, Any]:
    def _failed(error: str) -> Dict[str, Any]:
        state.logs.append({"stage": "Generation Failed", "message": error})
        return {
            "phase": Phase.GENERATION_FAILED,
            "error": error,
            "emitted": state.emitted + [_assistant(ERROR_MESSAGE, "error")],
            "logs": state.logs,
        }

    try:
        text = generator.generate(state.request, state.day_count)
    except GenerationError as e:
        logger.error("Itinerary generation failed for %s: %s", state.conversation_id, e)
        return _failed("generation")

    result = parse_itinerary_response(
        text,
        state.request,
        requested_days=state.day_count,
        partial_ratio=settings.partial_itinerary_ratio,
    )
    if not result.ok:
        return _failed(result.error.value)

    state.logs.append({
        "stage": "Itinerary Generated",
        "message": f"Parsed {len(result.document.itinerary)} days",
        "warnings": result.warnings,
    })
    return {"itinerary": result.document, "warnings": result.warnings, "logs": state.logs}


def enrich_itinerary(state: TurnState) -> Dict[str, Any]:
    document = enrich_document(state.itinerary, state.travel_data)
    state.logs.append({
        "stage": "Itinerary Enriched",
        "message": "Attached real hotels and restaurants" if not state.travel_data.is_empty()
        else "No places available; itinerary left as generated",
    })
    return {
        "itinerary": document,
        "phase": Phase.PRESENTED,
        "emitted": state.emitted + [_assistant(ITINERARY_READY_MESSAGE, "itinerary_ready")],
        "logs": state.logs,
    }


def budget_agent(state: TurnState) -> Dict[str, Any]:
    estimate = estimate_trip_cost(state.itinerary)
    state.logs.append({
        "stage": "Budget Estimated",
        "message": f"Estimated {estimate.currency}{estimate.min}-{estimate.max} per person",
    })
    return {"price_estimate": estimate, "logs": state.logs}
