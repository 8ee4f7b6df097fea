from .budget import estimate_trip_cost
from .duration import normalize_duration
from .enrich import enrich_document, enrich_itinerary
from .itinerary import (
    ItineraryErrorKind,
    ItineraryParseResult,
    extract_json_object,
    parse_itinerary_response,
)
from .reconcile import reconcile
from .trip_ready import TRIP_READY_MARKER, has_trip_ready, parse_trip_ready

__all__ = [
    'TRIP_READY_MARKER',
    'ItineraryErrorKind',
    'ItineraryParseResult',
    'enrich_document',
    'enrich_itinerary',
    'estimate_trip_cost',
    'extract_json_object',
    'has_trip_ready',
    'normalize_duration',
    'parse_itinerary_response',
    'parse_trip_ready',
    'reconcile',
]
