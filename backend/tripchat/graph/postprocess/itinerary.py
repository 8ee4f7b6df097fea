"""
Turn the generator's raw text into a consistent ItineraryDocument.

LLM output is treated as untrusted: the JSON object is cut out of whatever
prose surrounds it, header fields are backfilled from the request that was
sent, and every day is renumbered from its position. Bad output never raises;
callers get an ItineraryParseResult and must look at `ok`.
"""

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ValidationError

from tripchat.config import get_settings
from tripchat.models.entities import Activity, DayPlan, ItineraryDocument, Place
from tripchat.models.trip_slots import SLOT_FIELDS, ResolvedTripRequest

logger = logging.getLogger(__name__)


class ItineraryErrorKind(str, Enum):
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_ITINERARY = "empty_itinerary"


class ItineraryParseResult(BaseModel):
    document: Optional[ItineraryDocument] = None
    error: Optional[ItineraryErrorKind] = None
    warnings: List[str] = []

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None

    @classmethod
    def success(cls, document: ItineraryDocument, warnings: List[str]) -> "ItineraryParseResult":
        return cls(document=document, warnings=warnings)

    @classmethod
    def failure(cls, kind: ItineraryErrorKind, warnings: Optional[List[str]] = None) -> "ItineraryParseResult":
        return cls(error=kind, warnings=warnings or [])


def extract_json_object(text: str) -> Optional[dict]:
    """Parse the span from the first '{' to the last '}' as a JSON object."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Itinerary JSON did not parse: %s", e)
        return None
    return data if isinstance(data, dict) else None


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    value = str(value).strip()
    return value or None


def _activity(raw: Any) -> Optional[Activity]:
    if isinstance(raw, str):
        return Activity(name=raw.strip()) if raw.strip() else None
    if not isinstance(raw, dict):
        return None
    name = _text(raw.get("name")) or _text(raw.get("title")) or _text(raw.get("activity"))
    if not name:
        return None
    extras = {k: v for k, v in raw.items() if k not in ("name", "title", "activity", "description", "duration", "time")}
    return Activity(
        name=name,
        description=_text(raw.get("description")),
        duration=_text(raw.get("duration")),
        time=_text(raw.get("time")),
        **extras,
    )


def _place_or_text(raw: Any) -> Union[Place, str]:
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, dict) and _text(raw.get("name")):
        try:
            return Place.model_validate(raw)
        except ValidationError:
            return _text(raw.get("name"))
    # a dict without a name is a placeholder the enricher may fill
    return ""


def _day(index: int, raw: Any, warnings: List[str]) -> DayPlan:
    if isinstance(raw, str):
        raw = {"title": raw}
    elif not isinstance(raw, dict):
        raw = {}

    activities_raw = raw.get("activities")
    if not isinstance(activities_raw, list):
        if activities_raw is not None:
            warnings.append(f"day {index + 1}: activities was not a list")
        else:
            warnings.append(f"day {index + 1}: no activities")
        logger.warning("Day %d has no usable activities list", index + 1)
        activities_raw = []

    activities = [a for a in (_activity(item) for item in activities_raw) if a is not None]
    extras = {
        k: v for k, v in raw.items()
        if k not in ("day", "title", "date", "activities", "accommodation", "dining")
    }
    return DayPlan(
        # position is authoritative; whatever day number the model wrote is ignored
        day=index + 1,
        title=_text(raw.get("title")) or f"Day {index + 1}",
        date=_text(raw.get("date")),
        activities=activities,
        accommodation=_place_or_text(raw.get("accommodation")),
        dining=_place_or_text(raw.get("dining")),
        **extras,
    )


def _tips(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [raw.strip()] if raw.strip() else []
    if isinstance(raw, list):
        return [t for t in (_text(item) for item in raw) if t]
    return []


def parse_itinerary_response(
    text: str,
    request: ResolvedTripRequest,
    requested_days: Optional[int] = None,
    partial_ratio: Optional[float] = None,
) -> ItineraryParseResult:
    data = extract_json_object(text)
    if data is None:
        logger.error("No JSON object found in itinerary response (%d chars)", len(text or ""))
        return ItineraryParseResult.failure(ItineraryErrorKind.MALFORMED_RESPONSE)

    raw_days = data.get("itinerary")
    if not isinstance(raw_days, list) or not raw_days:
        logger.error("Itinerary response contained no days")
        return ItineraryParseResult.failure(ItineraryErrorKind.EMPTY_ITINERARY)

    warnings: List[str] = []
    header = {}
    for field in SLOT_FIELDS:
        header[field] = _text(data.get(field)) or getattr(request, field)

    days = [_day(i, raw, warnings) for i, raw in enumerate(raw_days)]

    if partial_ratio is None:
        partial_ratio = get_settings().partial_itinerary_ratio
    if requested_days and len(days) < requested_days * partial_ratio:
        message = f"partial itinerary: {len(days)} of {requested_days} requested days"
        warnings.append(message)
        logger.warning(message)

    document = ItineraryDocument(
        **header,
        itinerary=days,
        tips=_tips(data.get("tips")),
    )
    logger.info("Itinerary parsed: %d days, %d warnings", len(days), len(warnings))
    return ItineraryParseResult.success(document, warnings)
