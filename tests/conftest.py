"""
Shared fixtures.

Time and identifiers are pinned so that datasets are reproducible.
"""

import pytest

from account_manager.identifiers import SequentialIdGenerator
from account_manager.normalization import Normalizer
from account_manager.orchestrator import AccountManager
from account_manager.reconciliation import Reconciler
from account_manager.services.storage import InMemoryDatasetStorage


START_MS = 1_700_000_000_000


class FakeClock:
    """Returns a fixed time that only moves when a test advances it."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids() -> SequentialIdGenerator:
    # Constant time component: ids come out as "acc-0-1", "acc-0-2", ...
    return SequentialIdGenerator(clock=lambda: 0)


@pytest.fixture
def normalizer(ids, clock) -> Normalizer:
    return Normalizer(id_generator=ids, clock=clock)


@pytest.fixture
def reconciler(normalizer, ids, clock) -> Reconciler:
    return Reconciler(normalizer=normalizer, id_generator=ids, clock=clock)


@pytest.fixture
def storage() -> InMemoryDatasetStorage:
    return InMemoryDatasetStorage()


@pytest.fixture
def manager(storage, normalizer, reconciler, ids, clock) -> AccountManager:
    return AccountManager(
        storage=storage,
        normalizer=normalizer,
        reconciler=reconciler,
        id_generator=ids,
        clock=clock,
    )
