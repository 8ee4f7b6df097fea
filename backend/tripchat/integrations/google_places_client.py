"""
Google Places integration for TripChat.

Supplies the real hotels and restaurants that the itinerary enricher assigns
to each day. Without GOOGLE_PLACES_API_KEY every search returns an empty list
and itineraries are presented without enrichment.
"""

import logging
from typing import Any, Dict, List, Optional

import googlemaps
from googlemaps.exceptions import ApiError, Timeout, TransportError

from tripchat.config import get_settings
from tripchat.models.entities import Place, TravelData

logger = logging.getLogger(__name__)

PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo?maxwidth={width}&photo_reference={ref}&key={key}"
MAPS_URL = "https://www.google.com/maps/place/?q=place_id:{place_id}"


class GooglePlacesClient:
    """Google Places API client for finding hotels and restaurants at a destination"""

    def __init__(self, api_key: Optional[str] = None, client=None, limit: Optional[int] = None):
        settings = get_settings()
        self.api_key = api_key or settings.google_places_api_key
        self.limit = limit or settings.places_limit
        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = googlemaps.Client(key=self.api_key)
            logger.info("Google Places API initialized")
        else:
            self.client = None
            logger.warning("GOOGLE_PLACES_API_KEY not found in environment variables")

    def _photo_urls(self, place: Dict[str, Any], width: int = 800) -> List[str]:
        if not self.api_key:
            return []
        return [
            PHOTO_URL.format(width=width, ref=photo["photo_reference"], key=self.api_key)
            for photo in place.get("photos", [])[:3]
            if photo.get("photo_reference")
        ]

    def _to_place(self, raw: Dict[str, Any]) -> Optional[Place]:
        name = raw.get("name")
        if not name:
            return None
        place_id = raw.get("place_id")
        return Place(
            name=name,
            rating=raw.get("rating"),
            address=raw.get("formatted_address") or raw.get("vicinity"),
            images=self._photo_urls(raw),
            google_maps_url=MAPS_URL.format(place_id=place_id) if place_id else None,
            place_id=place_id,
        )

    def _search(self, query: str, place_type: str) -> List[Place]:
        if not self.client:
            logger.warning("Google Places API not available")
            return []
        try:
            result = self.client.places(query=query, type=place_type)
        except (ApiError, TransportError, Timeout) as e:
            logger.warning(f"Places search failed for {query!r}: {e}")
            return []

        places = []
        seen_ids = set()
        for raw in result.get("results", []):
            place = self._to_place(raw)
            if place is None or (place.place_id and place.place_id in seen_ids):
                continue
            seen_ids.add(place.place_id)
            places.append(place)
            if len(places) >= self.limit:
                break

        logger.info(f"Found {len(places)} {place_type} results for {query!r}")
        return places

    def search_hotels(self, destination: str) -> List[Place]:
        return self._search(f"hotels in {destination}", "lodging")

    def search_restaurants(self, destination: str) -> List[Place]:
        return self._search(f"restaurants in {destination}", "restaurant")

    def travel_data(self, destination: str) -> TravelData:
        return TravelData(
            hotels=self.search_hotels(destination),
            restaurants=self.search_restaurants(destination),
        )
