import random

import pytest

from fakes import FakeStore, RecordingPublisher
from shgame.domain.common.session import Session


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def session(store, publisher):
    return Session(game_id=1, store=store, publisher=publisher, rng=random.Random(7))
