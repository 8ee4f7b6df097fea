from typing import Callable

import pytest

from fakes import FakeChatBackend, FakeGenerator, FakeRepository
from tripchat.config import Settings
from tripchat.models.entities import Place, TravelData
from tripchat.session import SessionController


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def hotels():
    return [
        Place(name="Hotel Lumiere", rating=4.6, place_id="h1"),
        Place(name="Hotel Seine", rating=3.9, place_id="h2"),
    ]


@pytest.fixture
def restaurants():
    return [Place(name="Chez Marie", rating=4.3, place_id="r1")]


@pytest.fixture
def travel_data(hotels, restaurants):
    return TravelData(hotels=hotels, restaurants=restaurants)


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def make_controller(settings, repository) -> Callable[..., SessionController]:
    def _make(backend=None, generator=None, repo=None):
        return SessionController(
            chat_backend=backend or FakeChatBackend(),
            generator=generator or FakeGenerator(),
            repository=repo or repository,
            settings=settings,
        )
    return _make


