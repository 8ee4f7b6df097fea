from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Set

SLOT_FIELDS: List[str] = ["destination", "origin", "travelers", "dates", "duration", "purpose"]

# Substituted by the reconciler when nothing else supplies a value
SLOT_DEFAULTS: Dict[str, str] = {
    "destination": "the destination",
    "origin": "your location",
    "duration": "5 days",
    "travelers": "1 person",
    "purpose": "leisure",
    "dates": "flexible dates",
}

# Normalized key -> raw value parsed from one TRIP_READY block
RawTripInfo = Dict[str, str]


class TripSlots(BaseModel):
    destination: Optional[str] = None
    origin: Optional[str] = None
    travelers: Optional[str] = None
    dates: Optional[str] = None
    duration: Optional[str] = None
    purpose: Optional[str] = None

    def filled(self) -> Dict[str, str]:
        """Only the slots that hold a non-empty value."""
        return {f: getattr(self, f) for f in SLOT_FIELDS if getattr(self, f)}


class ResolvedTripRequest(BaseModel):
    destination: str
    origin: str
    duration: str
    travelers: str
    purpose: str
    dates: str
    defaulted: Set[str] = Field(default_factory=set, exclude=True)

    @property
    def confirmed(self) -> bool:
        """True when destination and duration came from the conversation, not from defaults."""
        return "destination" not in self.defaulted and "duration" not in self.defaulted

    def header(self) -> Dict[str, str]:
        return {f: getattr(self, f) for f in SLOT_FIELDS}
