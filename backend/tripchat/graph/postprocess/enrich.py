import logging
from typing import List, Union

from tripchat.models.entities import DayPlan, ItineraryDocument, Place, TravelData

logger = logging.getLogger(__name__)


def _is_named_place(value: Union[Place, str]) -> bool:
    # free text from the model counts as a placeholder; only a real Place is kept
    return isinstance(value, Place) and bool(value.name)


def enrich_itinerary(days: List[DayPlan], travel_data: TravelData) -> List[DayPlan]:
    """
    Give every day without a named hotel/restaurant a real one, reusing the
    places cyclically when there are fewer of them than days.
    """
    if travel_data.is_empty():
        logger.info("Enrichment skipped: no hotels or restaurants available")
        return list(days)

    hotels = travel_data.hotels
    restaurants = travel_data.restaurants
    enriched = []
    for i, day in enumerate(days):
        day = day.model_copy()
        if hotels and not _is_named_place(day.accommodation):
            day.accommodation = hotels[i % len(hotels)]
        if restaurants and not _is_named_place(day.dining):
            day.dining = restaurants[i % len(restaurants)]
        enriched.append(day)

    logger.info(
        "Enriched %d days with %d hotels and %d restaurants",
        len(enriched), len(hotels), len(restaurants),
    )
    return enriched


def enrich_document(document: ItineraryDocument, travel_data: TravelData) -> ItineraryDocument:
    """Enrich the days and attach the place lists to the document."""
    updated = document.model_copy()
    updated.itinerary = enrich_itinerary(document.itinerary, travel_data)
    if travel_data.hotels:
        updated.hotels = list(travel_data.hotels)
    if travel_data.restaurants:
        updated.restaurants = list(travel_data.restaurants)
    return updated
