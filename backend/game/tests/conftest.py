import pytest

from game.persistence import KeyValueGameRepository
from game.session.coordinator import GameCoordinator
from game.tests.stores import FlakyStore


@pytest.fixture
def coordinator(repository: KeyValueGameRepository) -> GameCoordinator:
    return GameCoordinator(repository)


@pytest.fixture
def flaky_store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def flaky_coordinator(flaky_store: FlakyStore) -> GameCoordinator:
    return GameCoordinator(KeyValueGameRepository(flaky_store))
