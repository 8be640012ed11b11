"""
Identifier and clock capabilities.

The Normalizer and Reconciler never read the wall clock or a global
counter directly. They receive a clock and an IdGenerator, so tests can
pin both and get byte-identical datasets.
"""

import itertools
import time
from typing import Callable, Optional


# Returns milliseconds since the epoch.
Clock = Callable[[], int]

ACCOUNT_PREFIX = "acc"
GROUP_PREFIX = "grp"


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class SequentialIdGenerator:
    """
    Builds identifiers as ``<prefix>-<now_ms>-<sequence>``.

    The sequence is monotonic for the lifetime of the generator, so two
    identifiers minted in the same millisecond still differ.
    """

    def __init__(self, clock: Optional[Clock] = None, start: int = 1):
        self._clock = clock or now_ms
        self._sequence = itertools.count(start)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{self._clock()}-{next(self._sequence)}"


IdGenerator = Callable[[str], str]
