from tripchat.graph.postprocess import enrich_document, enrich_itinerary
from tripchat.models.entities import DayPlan, ItineraryDocument, Place, TravelData


def _days(n, **fields):
    return [DayPlan(day=i + 1, title=f"Day {i + 1}", **fields) for i in range(n)]


def test_hotels_assigned_cyclically(hotels):
    days = enrich_itinerary(_days(3), TravelData(hotels=hotels))
    assert [d.accommodation.name for d in days] == ["Hotel Lumiere", "Hotel Seine", "Hotel Lumiere"]
    # restaurants were empty: dining untouched
    assert [d.dining for d in days] == ["", "", ""]


def test_restaurants_independent_of_hotels(restaurants):
    days = enrich_itinerary(_days(2, accommodation="Own apartment"), TravelData(restaurants=restaurants))
    assert [d.dining.name for d in days] == ["Chez Marie", "Chez Marie"]
    assert [d.accommodation for d in days] == ["Own apartment", "Own apartment"]


def test_named_places_are_kept(travel_data):
    own = Place(name="Le Bristol", rating=4.9)
    days = _days(2)
    days[1].accommodation = own
    enriched = enrich_itinerary(days, travel_data)
    assert enriched[0].accommodation.name == "Hotel Lumiere"
    assert enriched[1].accommodation is own


def test_free_text_placeholder_is_replaced(travel_data):
    days = enrich_itinerary(_days(1, accommodation="Hotel near the station"), travel_data)
    assert days[0].accommodation.name == "Hotel Lumiere"


def test_enrichment_is_idempotent(travel_data):
    once = enrich_itinerary(_days(5), travel_data)
    twice = enrich_itinerary(once, travel_data)
    assert [d.model_dump() for d in twice] == [d.model_dump() for d in once]


def test_no_places_leaves_itinerary_unchanged():
    days = _days(2, accommodation="Somewhere nice")
    assert enrich_itinerary(days, TravelData()) == days


def test_enrich_does_not_mutate_input(travel_data):
    days = _days(2)
    enrich_itinerary(days, travel_data)
    assert days[0].accommodation == ""


def test_document_gets_place_lists(travel_data):
    doc = ItineraryDocument(
        destination="Paris", origin="London", duration="2 days", travelers="1 person",
        purpose="culture", dates="1 June", itinerary=_days(2),
    )
    enriched = enrich_document(doc, travel_data)
    assert [h.name for h in enriched.hotels] == ["Hotel Lumiere", "Hotel Seine"]
    assert [r.name for r in enriched.restaurants] == ["Chez Marie"]
    assert enriched.itinerary[1].dining.name == "Chez Marie"
    assert doc.hotels == []
