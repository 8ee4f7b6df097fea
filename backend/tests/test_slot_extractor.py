import pytest

from tripchat.graph.slots import build_rules, extract_slots, merge
from tripchat.models.trip_slots import TripSlots


def test_destination_after_preposition():
    assert extract_slots("I want to go to Paris").destination == "Paris"


def test_conversation_builds_up_slots():
    """Two turns: destination first, then company and length of the trip."""
    slots = TripSlots()
    slots = merge(slots, extract_slots("I want to go to Paris", slots))
    slots = merge(slots, extract_slots("with my wife for 5 days", slots))

    assert slots == TripSlots(destination="Paris", travelers="2 people (couple)", duration="5 days")
    assert slots.origin is None
    assert slots.dates is None
    assert slots.purpose is None


@pytest.mark.parametrize("text,expected", [
    ("Je voudrais aller à Rome", "Rome"),
    ("Quiero ir a Londres", "London"),
    ("thinking about New York maybe", "New York"),
    ("Let's plan a trip to Tokio", "Tokyo"),
])
def test_destination_localized_and_canonical(text, expected):
    assert extract_slots(text).destination == expected


def test_gazetteer_needs_whole_words():
    slots = extract_slots("I love Parisian food")
    assert slots.destination is None
    assert slots.purpose == "gastronomy"


def test_unknown_place_only_found_by_preposition():
    assert extract_slots("I want to go to Atlantis").destination == "Atlantis"
    assert extract_slots("I want to go to Atlantis", skip={"destination_by_preposition"}).destination is None


def test_origin_and_destination_in_one_sentence():
    slots = extract_slots("Flying from London to Paris")
    assert slots.origin == "London"
    assert slots.destination == "Paris"


@pytest.mark.parametrize("text,expected", [
    ("I live in London but want to go to Paris", "Paris"),
    ("I'm in Love with Rome", "Rome"),
    ("Two weeks in Atlantis", "Atlantis"),
    ("Je suis en France, je veux aller vers Lisbonne", "Lisbon"),
])
def test_where_you_are_is_not_where_you_go(text, expected):
    assert extract_slots(text).destination == expected


def test_month_with_lead_in():
    slots = extract_slots("I want to go to Japan in May")
    assert slots.destination == "Japan"
    assert slots.dates == "1 May"


def test_lowercase_may_is_a_verb():
    slots = extract_slots("we may go to Rome")
    assert slots.destination == "Rome"
    assert slots.dates is None


@pytest.mark.parametrize("text,expected", [
    ("from 28 June to 5 July", "28 June - 5 July"),
    ("from 3 to 10 June", "3 June - 10 June"),
    ("arriving on 14th of July", "14 July"),
    ("le 14 juillet", "14 July"),
    ("sometime in October", "1 October"),
    ("October sounds nice", "1 October"),
])
def test_dates(text, expected):
    assert extract_slots(text).dates == expected


def test_date_range_is_not_an_origin():
    slots = extract_slots("from 3 to 10 June")
    assert slots.origin is None


@pytest.mark.parametrize("text,expected", [
    ("for 5 days", "5 days"),
    ("10 jours", "10 days"),
    ("about 2 weeks", "2 weeks"),
])
def test_duration(text, expected):
    assert extract_slots(text).duration == expected


@pytest.mark.parametrize("text,expected", [
    ("I'm travelling alone", "1 person (solo)"),
    ("with my family", "family"),
    ("with my wife and my kids", "2 people (couple)"),
    ("We are 4 people", "4 people"),
])
def test_travelers(text, expected):
    assert extract_slots(text).travelers == expected


@pytest.mark.parametrize("text,expected", [
    ("we love museums", "culture"),
    ("some hiking would be great", "adventure"),
    ("food and museums", "culture"),
    ("just exploring", "exploring"),
])
def test_purpose_first_family_wins(text, expected):
    assert extract_slots(text).purpose == expected


def test_filled_slots_are_not_rederived():
    slots = extract_slots("to Rome for 3 days", current=TripSlots(destination="Paris"))
    assert slots.destination is None
    assert slots.duration == "3 days"


def test_no_match_leaves_everything_empty():
    assert extract_slots("hello there!") == TripSlots()
    assert extract_slots("") == TripSlots()


def test_rules_follow_locale_selection():
    french_only = build_rules(["fr"])
    assert extract_slots("for 5 days", rules=french_only).duration is None
    assert extract_slots("pour 5 jours", rules=french_only).duration == "5 days"
