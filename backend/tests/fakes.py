import json
from typing import Any, Dict, List, Optional

from tripchat.integrations.chat_backend import ChatBackend, ChatReply, ItineraryGenerator
from tripchat.models.entities import TravelData


class FakeChatBackend(ChatBackend):
    """Replies from a script; an exception entry is raised, a callable entry gets the user message."""

    def __init__(self, replies: Optional[List[Any]] = None, travel_data: Optional[TravelData] = None):
        self.replies = list(replies or [])
        self.travel_data = travel_data
        self.calls: List[Dict[str, Any]] = []

    def respond(self, message, history, collected_info):
        self.calls.append({"message": message, "history": list(history), "collected_info": collected_info})
        reply = self.replies.pop(0) if self.replies else "Tell me more!"
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(message)
        return ChatReply(message=reply, travel_data=self.travel_data)


class FakeGenerator(ItineraryGenerator):
    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls = []

    def generate(self, request, day_count):
        self.calls.append((request, day_count))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeRepository:
    """Same surface as ConversationRepository, kept in a dict."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}

    @property
    def enabled(self):
        return True

    def save(self, conversation_id, record):
        self.records[conversation_id] = {**record, "conversation_id": conversation_id}

    def load(self, conversation_id):
        return self.records.get(conversation_id)

    def list_recent(self, limit=50):
        return list(self.records.values())[:limit]

    def delete(self, conversation_id):
        return self.records.pop(conversation_id, None) is not None


def itinerary_json(days: int, destination: str = "Paris", **extra) -> str:
    payload = {
        "destination": destination,
        "itinerary": [
            {
                "day": i + 1,
                "title": f"Day {i + 1} in {destination}",
                "activities": [{"name": f"Walk {i + 1}", "description": "Stroll around"}],
                "accommodation": "",
                "dining": "",
            }
            for i in range(days)
        ],
        "tips": ["Carry water"],
        **extra,
    }
    return "Here is your plan:\n" + json.dumps(payload) + "\nEnjoy!"


def trip_ready(**fields) -> str:
    lines = ["Great, I have everything!", "TRIP_READY:"]
    lines += [f"{key.capitalize()}: {value}" for key, value in fields.items()]
    return "\n".join(lines)


