"""
The two LLM collaborators of a chat turn: the conversational backend that
answers the user (and eventually emits the TRIP_READY block), and the
itinerary generator that returns the day-by-day plan as JSON text.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel

from tripchat.graph.postprocess.trip_ready import TRIP_READY_MARKER, has_trip_ready, parse_trip_ready
from tripchat.integrations.exceptions import ChatBackendError, GenerationError, IntegrationError, UpstreamAPIError
from tripchat.integrations.google_places_client import GooglePlacesClient
from tripchat.integrations.openai_client import call_gpt
from tripchat.models.entities import TravelData
from tripchat.models.trip_slots import SLOT_FIELDS, ResolvedTripRequest, TripSlots

logger = logging.getLogger(__name__)


class ChatReply(BaseModel):
    success: bool = True
    message: str
    travel_data: Optional[TravelData] = None


class ChatBackend:
    def respond(self, message: str, history: List[Dict[str, str]], collected_info: TripSlots) -> ChatReply:
        raise NotImplementedError


class ItineraryGenerator:
    def generate(self, request: ResolvedTripRequest, day_count: int) -> str:
        raise NotImplementedError


SYSTEM_PROMPT = f"""You are Arya, a friendly travel agent chatting with a traveler.
Reply in the traveler's language. Ask one short question at a time until you know:
destination, origin, travelers, dates, duration and purpose of the trip.

Already collected:
{{collected}}
Still missing: {{missing}}

As soon as you know at least the destination and the duration, stop asking and
answer with exactly this block (keys in English, values in any language):

{TRIP_READY_MARKER}:
Destination: <city or country>
Origin: <where they travel from>
Travelers: <who is travelling>
Dates: <when>
Duration: <how long>
Purpose: <what the trip is about>
"""


class OpenAIChatBackend(ChatBackend):
    def __init__(self, places: Optional[GooglePlacesClient] = None, model: Optional[str] = None):
        self.places = places
        self.model = model

    def _system_prompt(self, collected_info: TripSlots) -> str:
        filled = collected_info.filled()
        collected = "\n".join(f"- {k}: {v}" for k, v in filled.items()) or "- nothing yet"
        missing = ", ".join(f for f in SLOT_FIELDS if f not in filled) or "nothing"
        return SYSTEM_PROMPT.format(collected=collected, missing=missing)

    def _travel_data(self, reply: str, collected_info: TripSlots) -> Optional[TravelData]:
        if self.places is None or not has_trip_ready(reply):
            return None
        raw = parse_trip_ready(reply) or {}
        destination = raw.get("destination") or collected_info.destination
        if not destination:
            return None
        return self.places.travel_data(destination)

    def respond(self, message: str, history: List[Dict[str, str]], collected_info: TripSlots) -> ChatReply:
        messages = [{"role": "system", "content": self._system_prompt(collected_info)}]
        messages += [
            {"role": m["role"], "content": m["content"]}
            for m in history
            if m.get("role") in ("user", "assistant") and m.get("content")
        ]
        messages.append({"role": "user", "content": message})

        try:
            reply = call_gpt(messages, model=self.model, temperature=0.7)
        except (IntegrationError, UpstreamAPIError) as e:
            raise ChatBackendError(f"Chat backend failed: {e}") from e

        return ChatReply(message=reply, travel_data=self._travel_data(reply, collected_info))


ITINERARY_PROMPT = """Create a detailed {day_count}-day itinerary for {destination}.
Traveling from: {origin}
Travelers: {travelers}
Focus: {purpose}
Dates: {dates}
Requested duration: {duration}

Provide a day-by-day breakdown with exactly {day_count} days, specific activities,
restaurants, and accommodations.
Format it as JSON with this structure:
{{
  "destination": "{destination}",
  "origin": "{origin}",
  "duration": "{duration}",
  "travelers": "{travelers}",
  "purpose": "{purpose}",
  "dates": "{dates}",
  "itinerary": [
    {{
      "day": 1,
      "title": "Arrival & First Impressions",
      "activities": [
        {{"name": "Activity Name", "description": "Description", "time": "09:00", "duration": "2 hours"}}
      ],
      "accommodation": "Hotel name and details",
      "dining": "Restaurant recommendations"
    }}
  ],
  "tips": ["tip 1", "tip 2"]
}}"""


class OpenAIItineraryGenerator(ItineraryGenerator):
    def __init__(self, model: Optional[str] = None):
        self.model = model

    def generate(self, request: ResolvedTripRequest, day_count: int) -> str:
        prompt = ITINERARY_PROMPT.format(day_count=day_count, **request.header())
        logger.info("Requesting %d-day itinerary for %s", day_count, request.destination)
        try:
            return call_gpt(prompt, model=self.model, response_format={"type": "json_object"}, temperature=0.4)
        except (IntegrationError, UpstreamAPIError) as e:
            raise GenerationError(f"Itinerary generation failed: {e}") from e
