
import json
import re
from typing import Optional

from pydantic import BaseModel

from tripchat.models.entities import ItineraryDocument, Place

TITLE_MAX = 50
HIGHLIGHTS_MAX = 5

_DEST_TAIL = re.compile(r"\s+(?:for|from|-).*$", re.IGNORECASE)
_DEST_IN_MESSAGE = re.compile(r"(?<!\w)(?:to|in|visit)\s+([A-Z][a-zA-Z\s]+?)(?:\s+for|\s+from|,|\.|$)")
_DURATION_IN_MESSAGE = re.compile(r"(\d+\s*(?:day|night|week)s?)", re.IGNORECASE)


def _to_dict(obj):
    """Convert BaseModel or dict to plain dict, else return None."""
    if obj is None:
        return None
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, dict):
        return obj
    return None


def _prune(d: dict, keys: list):
    return {k: d.get(k) for k in keys if d.get(k) not in (None, "", [])}


def generate_chat_title(message: str, destination: Optional[str] = None, duration: Optional[str] = None) -> str:
    """
    Sidebar title for a conversation: "<destination> - <duration>" once both
    are known, otherwise whatever can be pulled out of the first message.
    """
    if destination and duration:
        return f"{_DEST_TAIL.sub('', destination).strip()} - {duration}"

    message = (message or "").strip()
    dest_match = _DEST_IN_MESSAGE.search(message)
    dur_match = _DURATION_IN_MESSAGE.search(message)
    if dest_match and dur_match:
        return f"{dest_match.group(1).strip()} - {dur_match.group(1)}"
    if dest_match:
        return dest_match.group(1).strip()

    if not message:
        return "New chat"
    if len(message) > TITLE_MAX:
        return message[:TITLE_MAX - 3] + "..."
    return message


def summarize_itinerary(document: Optional[ItineraryDocument]) -> Optional[dict]:
    if document is None:
        return None
    highlights = []
    for day in document.itinerary:
        for activity in day.activities:
            if len(highlights) >= HIGHLIGHTS_MAX:
                break
            highlights.append(activity.name)
    return {
        "destination": document.destination,
        "total_days": len(document.itinerary),
        "highlights": highlights,
    }


def format_trip(document: Optional[ItineraryDocument]) -> dict:
    """Compact view of an itinerary for API responses and the CLI demo."""
    if document is None:
        return {}

    def serialize_place(value):
        if isinstance(value, Place):
            return _prune(_to_dict(value), ["name", "rating", "address", "googleMapsUrl"])
        return value or None

    days_out = []
    for day in document.itinerary:
        days_out.append({
            "day": day.day,
            "title": day.title,
            "date": day.date,
            "activities": [
                _prune(_to_dict(a), ["name", "description", "time", "duration"]) for a in day.activities
            ],
            "accommodation": serialize_place(day.accommodation),
            "dining": serialize_place(day.dining),
        })

    header = _prune(_to_dict(document), ["destination", "origin", "duration", "travelers", "purpose", "dates"])
    return {**header, "itinerary": days_out, "tips": document.tips}


if __name__ == "__main__":
    from tripchat.session import build_default_controller

    controller = build_default_controller()
    conversation = controller.start_new_conversation()
    for text in [
        "Hi! I want to go to Lisbon",
        "With my wife, from London, for 4 days in June. We love food.",
    ]:
        turn = controller.send_message(text, conversation.conversation_id)
        for m in turn.messages:
            print(f"assistant> {m['content']}")

    itinerary = controller.get_itinerary(conversation.conversation_id)
    print(json.dumps({"trip": format_trip(itinerary), "summary": summarize_itinerary(itinerary)}, indent=2, default=str))
