import json

import pytest

from fakes import FakeChatBackend, FakeGenerator, itinerary_json, trip_ready
from tripchat.graph.state import Phase
from tripchat.integrations.exceptions import ChatBackendError, GenerationError
from tripchat.models.entities import Place, TravelData
from tripchat.session import GREETING, ConversationNotFoundError, TurnInProgressError


def test_new_conversation_starts_with_greeting(make_controller):
    controller = make_controller()
    session = controller.start_new_conversation()

    assert session.phase == Phase.COLLECTING_INFO
    assert [m["content"] for m in session.messages] == [GREETING]


def test_message_without_id_starts_its_own_conversation(make_controller):
    controller = make_controller(backend=FakeChatBackend(["Where to?", "Rome, great!"]))
    existing = controller.start_new_conversation().conversation_id

    turn = controller.send_message("I'm going to Rome")

    assert turn.conversation_id != existing
    assert turn.slots.destination == "Rome"
    untouched = controller.load_conversation(existing)
    assert [m["content"] for m in untouched.messages] == [GREETING]
    assert untouched.slots.destination is None


def test_collecting_turn_fills_slots_and_relays_reply(make_controller):
    backend = FakeChatBackend(["Lovely! Where are you flying from?"])
    controller = make_controller(backend=backend)
    cid = controller.start_new_conversation().conversation_id

    turn = controller.send_message("I want to go to Paris", cid)

    assert turn.phase == Phase.COLLECTING_INFO
    assert turn.slots.destination == "Paris"
    assert [m["content"] for m in turn.messages] == ["Lovely! Where are you flying from?"]
    assert turn.itinerary is None
    # the backend sees the collected slots and the earlier messages
    assert backend.calls[0]["collected_info"].destination == "Paris"
    assert backend.calls[0]["history"] == [{"role": "assistant", "content": GREETING}]


def test_trip_ready_turn_presents_enriched_itinerary(make_controller, travel_data):
    backend = FakeChatBackend(
        ["Where from?", trip_ready(destination="Paris", duration="3 days")],
        travel_data=travel_data,
    )
    generator = FakeGenerator([itinerary_json(3)])
    controller = make_controller(backend=backend, generator=generator)
    cid = controller.start_new_conversation().conversation_id

    controller.send_message("I want to go to Paris with my wife", cid)
    turn = controller.send_message("From London, for 3 days", cid)

    assert turn.phase == Phase.PRESENTED
    assert [m["kind"] for m in turn.messages] == ["confirmation", "itinerary_ready"]
    assert turn.messages[0]["content"] == "Perfect! I've got all the details. Let me create your 3 days trip to Paris! 🎉"
    assert turn.messages[1]["content"] == "✨ Your personalized itinerary is ready!"

    request, day_count = generator.calls[0]
    assert day_count == 3
    assert request.origin == "London"
    assert request.travelers == "2 people (couple)"

    days = turn.itinerary.itinerary
    assert [d.day for d in days] == [1, 2, 3]
    assert [d.accommodation.name for d in days] == ["Hotel Lumiere", "Hotel Seine", "Hotel Lumiere"]
    assert turn.price_estimate is not None

    session = controller.load_conversation(cid)
    assert session.itinerary == turn.itinerary
    assert session.title == "Paris - 3 days"
    assert controller.get_itinerary(cid) == turn.itinerary


def test_defaulted_destination_skips_confirmation(make_controller):
    backend = FakeChatBackend([trip_ready(origin="London")])
    generator = FakeGenerator([itinerary_json(5, destination="Somewhere")])
    controller = make_controller(backend=backend, generator=generator)

    turn = controller.send_message("hello!")

    assert turn.phase == Phase.PRESENTED
    assert [m["kind"] for m in turn.messages] == ["itinerary_ready"]
    request, day_count = generator.calls[0]
    assert request.destination == "the destination"
    assert day_count == 5


@pytest.mark.parametrize("generated,error", [
    ('{"itinerary": []}', "empty_itinerary"),
    ("I could not do it, sorry", "malformed_response"),
    (GenerationError("timeout"), "generation"),
])
def test_failed_generation_keeps_slots_and_can_retry(make_controller, generated, error):
    backend = FakeChatBackend([
        trip_ready(destination="Rome", duration="2 days"),
        "No problem, shall I try again?",
        trip_ready(destination="Rome", duration="2 days"),
    ])
    generator = FakeGenerator([generated, itinerary_json(2, destination="Rome")])
    controller = make_controller(backend=backend, generator=generator)
    cid = controller.start_new_conversation().conversation_id

    failed = controller.send_message("Rome for 2 days please", cid)
    assert failed.phase == Phase.GENERATION_FAILED
    assert failed.error == error
    assert failed.itinerary is None
    assert failed.messages[-1]["content"] == "❌ Sorry, I encountered an error. Please try again."
    assert failed.slots.destination == "Rome"
    assert failed.slots.duration == "2 days"
    assert controller.get_itinerary(cid) is None

    again = controller.send_message("ok", cid)
    assert again.phase == Phase.COLLECTING_INFO
    assert again.slots.destination == "Rome"

    retried = controller.send_message("yes please", cid)
    assert retried.phase == Phase.PRESENTED
    assert len(retried.itinerary.itinerary) == 2


def test_chat_backend_failure_is_a_retryable_message(make_controller):
    backend = FakeChatBackend([ChatBackendError("quota")])
    controller = make_controller(backend=backend)
    cid = controller.start_new_conversation().conversation_id

    turn = controller.send_message("Paris for 3 days", cid)

    assert turn.phase == Phase.COLLECTING_INFO
    assert turn.error == "chat_backend"
    assert [m["kind"] for m in turn.messages] == ["error"]
    assert turn.slots.destination == "Paris"


def test_second_turn_while_in_flight_is_rejected(make_controller):
    captured = {}
    controller = None

    def reentrant(message):
        try:
            controller.send_message("me too", cid)
        except TurnInProgressError as e:
            captured["error"] = e
        return "Got it"

    controller = make_controller(backend=FakeChatBackend([reentrant]))
    cid = controller.start_new_conversation().conversation_id

    turn = controller.send_message("Paris", cid)

    assert isinstance(captured["error"], TurnInProgressError)
    assert turn.messages[0]["content"] == "Got it"
    # the lock is released once the turn completes
    assert controller.send_message("next", cid).stale is False


def test_result_for_abandoned_conversation_is_dropped(make_controller):
    controller = None

    def start_over(message):
        controller.start_new_conversation(previous_id=old.conversation_id)
        return "Too late"

    controller = make_controller(backend=FakeChatBackend([start_over]))
    old = controller.start_new_conversation()

    turn = controller.send_message("I want to go to Paris", old.conversation_id)

    assert turn.stale
    assert turn.messages == []
    assert old.slots.destination is None
    assert [m["content"] for m in old.messages] == [GREETING]


def test_leaving_a_conversation_by_loading_another(make_controller):
    controller = None

    def switch(message):
        controller.load_conversation(other, leaving=cid)
        return "Too late"

    controller = make_controller(backend=FakeChatBackend([switch]))
    other = controller.start_new_conversation().conversation_id
    cid = controller.start_new_conversation().conversation_id

    assert controller.send_message("Paris", cid).stale


def test_other_conversations_do_not_disturb_a_running_turn(make_controller):
    controller = None

    def busy_elsewhere(message):
        # another client opens, views and starts chats meanwhile
        controller.load_conversation(other)
        controller.get_itinerary(other)
        controller.start_new_conversation()
        return "Paris it is!"

    controller = make_controller(backend=FakeChatBackend([busy_elsewhere]))
    other = controller.start_new_conversation().conversation_id
    cid = controller.start_new_conversation().conversation_id

    turn = controller.send_message("I want to go to Paris", cid)

    assert not turn.stale
    assert turn.messages[0]["content"] == "Paris it is!"
    session = controller.load_conversation(cid)
    assert session.slots.destination == "Paris"
    assert [m["content"] for m in session.messages][-2:] == ["I want to go to Paris", "Paris it is!"]


def test_reset_during_turn_keeps_reset_state(make_controller):
    controller = None

    def reset(message):
        controller.reset(cid)
        return "Where to?"

    controller = make_controller(backend=FakeChatBackend([reset]))
    cid = controller.start_new_conversation().conversation_id

    turn = controller.send_message("Paris for 3 days", cid)

    assert turn.stale
    session = controller.load_conversation(cid)
    assert session.slots.destination is None
    assert session.phase == Phase.COLLECTING_INFO


def test_new_chat_resets_everything(make_controller):
    backend = FakeChatBackend([trip_ready(destination="Paris", duration="2 days")])
    controller = make_controller(backend=backend, generator=FakeGenerator([itinerary_json(2)]))
    cid = controller.start_new_conversation().conversation_id
    controller.send_message("Paris for 2 days", cid)

    session = controller.reset(cid)

    assert session.phase == Phase.COLLECTING_INFO
    assert session.itinerary is None
    assert session.slots.filled() == {}
    assert [m["content"] for m in session.messages] == [GREETING]


def test_conversation_reloads_from_storage(make_controller, repository):
    hotel = Place(name="Hotel Lumiere", rating=4.6, google_maps_url="https://maps.example/h")
    backend = FakeChatBackend([trip_ready(destination="Paris", duration="2 days")], travel_data=TravelData(hotels=[hotel]))
    first = make_controller(backend=backend, generator=FakeGenerator([itinerary_json(2)]))
    cid = first.start_new_conversation().conversation_id
    first.send_message("Paris for 2 days", cid)

    # a fresh controller (new process) over the same storage
    second = make_controller()
    session = second.load_conversation(cid)

    assert session.slots.destination == "Paris"
    assert session.phase == Phase.PRESENTED
    assert session.itinerary.itinerary[0].accommodation.google_maps_url == "https://maps.example/h"
    assert len(session.messages) == 4
    assert json.dumps(repository.records[cid], default=str)


def test_history_lists_and_delete(make_controller):
    controller = make_controller(backend=FakeChatBackend(["Hi!"]))
    a = controller.start_new_conversation().conversation_id
    b = controller.start_new_conversation().conversation_id
    controller.send_message("I want to go to Lisbon", a)

    listed = {c["conversation_id"]: c for c in controller.refresh_history()}
    assert set(listed) == {a, b}
    assert listed[a]["title"] == "Lisbon"

    controller.delete_conversation(a)
    assert [c["conversation_id"] for c in controller.refresh_history()] == [b]
    with pytest.raises(ConversationNotFoundError):
        controller.load_conversation(a)
    with pytest.raises(ConversationNotFoundError):
        controller.delete_conversation(a)


def test_storage_failure_does_not_break_the_turn(make_controller, monkeypatch):
    import tripchat.integrations.mongo_client as mongo_client
    from tripchat.config import Settings
    from tripchat.integrations.mongo_client import ConversationRepository

    monkeypatch.setattr(mongo_client, "_client", None)
    monkeypatch.setattr(mongo_client, "get_settings", lambda: Settings(mongodb_uri="mongodb://user:pa@ss@localhost"))
    controller = make_controller(backend=FakeChatBackend(["Lovely!"]), repo=ConversationRepository())

    turn = controller.send_message("I want to go to Paris")

    assert turn.messages[0]["content"] == "Lovely!"
    assert controller.load_conversation(turn.conversation_id).slots.destination == "Paris"
