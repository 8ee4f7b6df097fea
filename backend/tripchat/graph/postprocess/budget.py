import logging
from typing import Tuple, Union

from tripchat.graph.utils import first_int
from tripchat.models.entities import CostBreakdown, ItineraryDocument, Place, PriceEstimate

logger = logging.getLogger(__name__)

# (min, max) euro per night / per day, budget vs comfort
HOTEL_BANDS = [(4.5, (120, 200)), (4.0, (80, 140)), (3.5, (50, 100))]
HOTEL_LOW = (35, 70)
HOTEL_UNRATED = (50, 90)

DINNER_BANDS = [(4.5, (30, 50)), (4.0, (25, 40))]
DINNER_LOW = (20, 30)
DINNER_UNRATED = (20, 35)
BREAKFAST_LUNCH = (15, 25)

ACTIVITY = (10, 30)
TRANSPORT_PER_DAY = (8, 20)


def _band(value: Union[Place, str], bands, low, unrated) -> Tuple[int, int]:
    if isinstance(value, Place) and value.rating:
        for threshold, band in bands:
            if value.rating >= threshold:
                return band
        return low
    return unrated


def estimate_trip_cost(document: ItineraryDocument) -> PriceEstimate:
    """
    Rough per-person price range for a generated trip.

    Every day adds its night, meals, activities and local transport; a better
    rated hotel or restaurant moves that day into a pricier band.
    """
    lo = CostBreakdown()
    hi = CostBreakdown()

    for day in document.itinerary:
        if day.accommodation:
            a_min, a_max = _band(day.accommodation, HOTEL_BANDS, HOTEL_LOW, HOTEL_UNRATED)
            lo.accommodation += a_min
            hi.accommodation += a_max
        if day.dining:
            d_min, d_max = _band(day.dining, DINNER_BANDS, DINNER_LOW, DINNER_UNRATED)
            lo.dining += d_min
            hi.dining += d_max
        lo.dining += BREAKFAST_LUNCH[0]
        hi.dining += BREAKFAST_LUNCH[1]
        lo.activities += len(day.activities) * ACTIVITY[0]
        hi.activities += len(day.activities) * ACTIVITY[1]

    num_days = len(document.itinerary) or first_int(document.duration) or 5
    lo.transportation = num_days * TRANSPORT_PER_DAY[0]
    hi.transportation = num_days * TRANSPORT_PER_DAY[1]

    estimate = PriceEstimate(
        min=round(lo.total()),
        max=round(hi.total()),
        breakdown_min=lo,
        breakdown_max=hi,
        travelers=first_int(document.travelers) or 1,
    )
    logger.info("Estimated trip cost %s%d-%d", estimate.currency, estimate.min, estimate.max)
    return estimate
