import logging
from typing import Dict, List, Optional, Tuple

from tripchat.graph.slots.extractor import extract_slots
from tripchat.graph.utils import user_text
from tripchat.models.trip_slots import (
    SLOT_DEFAULTS,
    SLOT_FIELDS,
    RawTripInfo,
    ResolvedTripRequest,
    TripSlots,
)

logger = logging.getLogger(__name__)

# Keys the assistant has been seen to use in the TRIP_READY block, after normalization
KEY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "destination": ("destination", "location", "city"),
    "origin": ("origin", "from", "departure", "departurecity"),
    "travelers": ("travelers", "travellers", "people", "numberoftravelers"),
    "dates": ("dates", "date", "when", "traveldates"),
    "duration": ("duration", "days", "length"),
    "purpose": ("purpose", "focus", "interests"),
}

# The whole-conversation scan skips the loose "to <Capitalized>" rule; a
# conversation is full of capitalized words that are not destinations.
_FALLBACK_SKIP = ("destination_by_preposition",)


def _from_raw(raw: Optional[RawTripInfo], field: str) -> Optional[str]:
    if not raw:
        return None
    for key in KEY_ALIASES[field]:
        value = raw.get(key)
        if value and value.strip():
            return value.strip()
    return None


def reconcile(
    raw: Optional[RawTripInfo],
    slots: Optional[TripSlots],
    history: Optional[List[dict]] = None,
) -> ResolvedTripRequest:
    """
    Resolve every trip field, most trusted source first:
    TRIP_READY block, collected slots, a scan of everything the user said,
    and finally the fixed default for the field.

    The returned request records which fields fell back to a default so the
    orchestrator can tell a confirmed trip from a guessed one.
    """
    slots = slots or TripSlots()
    scanned: Optional[TripSlots] = None
    values: Dict[str, str] = {}
    defaulted = set()
    sources: Dict[str, str] = {}

    for field in SLOT_FIELDS:
        value = _from_raw(raw, field)
        source = "trip_ready"
        if not value:
            value = getattr(slots, field)
            source = "slots"
        if not value:
            if scanned is None:
                scanned = extract_slots(user_text(history), skip=_FALLBACK_SKIP)
            value = getattr(scanned, field)
            source = "history"
        if not value:
            value = SLOT_DEFAULTS[field]
            source = "default"
            defaulted.add(field)
        values[field] = value
        sources[field] = source

    logger.info("Trip request resolved (sources: %s)", sources)
    return ResolvedTripRequest(**values, defaulted=defaulted)
