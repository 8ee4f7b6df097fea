from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from tripchat.models.entities import ItineraryDocument, PriceEstimate, TravelData
from tripchat.models.trip_slots import RawTripInfo, ResolvedTripRequest, TripSlots


class Phase(str, Enum):
    COLLECTING_INFO = "collecting_info"
    READY_TO_GENERATE = "ready_to_generate"
    GENERATING = "generating"
    PRESENTED = "presented"
    GENERATION_FAILED = "generation_failed"


class TurnState(BaseModel):
    """Everything one chat turn reads and produces while it runs through the graph."""
    conversation_id: str
    message: str
    # earlier messages of the conversation, not including `message`
    history: List[Dict[str, str]] = Field(default_factory=list)
    slots: TripSlots = Field(default_factory=TripSlots)
    phase: Phase = Phase.COLLECTING_INFO
    travel_data: TravelData = Field(default_factory=TravelData)

    reply: Optional[str] = None
    trip_ready: Optional[RawTripInfo] = None
    request: Optional[ResolvedTripRequest] = None
    confirmed: bool = False
    day_count: Optional[int] = None
    itinerary: Optional[ItineraryDocument] = None
    price_estimate: Optional[PriceEstimate] = None
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    # assistant messages to append to the conversation, in order
    emitted: List[Dict[str, str]] = Field(default_factory=list)
    logs: List[dict] = Field(default_factory=list)
