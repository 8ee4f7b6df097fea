# tripchat/models/entities.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union


class Place(BaseModel):
    """A real hotel or restaurant supplied by the places provider."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    rating: Optional[float] = None
    address: Optional[str] = None
    images: List[str] = []
    google_maps_url: Optional[str] = Field(default=None, alias="googleMapsUrl")
    place_id: Optional[str] = None


class TravelData(BaseModel):
    hotels: List[Place] = []
    restaurants: List[Place] = []

    def is_empty(self) -> bool:
        return not self.hotels and not self.restaurants


class Activity(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    time: Optional[str] = None


class DayPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: int
    title: str
    date: Optional[str] = None
    activities: List[Activity] = []
    # free text from the model, or a real Place once enriched
    accommodation: Union[Place, str] = ""
    dining: Union[Place, str] = ""


class ItineraryDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    destination: str
    origin: str
    duration: str
    travelers: str
    purpose: str
    dates: str
    hotels: List[Place] = []
    restaurants: List[Place] = []
    itinerary: List[DayPlan] = []
    tips: List[str] = []


class CostBreakdown(BaseModel):
    accommodation: float = 0
    dining: float = 0
    activities: float = 0
    transportation: float = 0

    def total(self) -> float:
        return self.accommodation + self.dining + self.activities + self.transportation


class PriceEstimate(BaseModel):
    min: int
    max: int
    breakdown_min: CostBreakdown
    breakdown_max: CostBreakdown
    currency: str = "€"
    travelers: int = 1
