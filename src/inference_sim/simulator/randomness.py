"""Process-wide random source shared by request handlers."""

from __future__ import annotations

import random
import threading
import time


class SharedRandom:
    """A single seeded generator guarded by a lock for concurrent callers."""

    def __init__(self, seed: int | None = None):
        self._lock = threading.Lock()
        self._rng = random.Random(seed)

    def seed(self, seed: int) -> None:
        with self._lock:
            self._rng.seed(seed)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both inclusive."""
        with self._lock:
            return self._rng.randint(low, high)


_shared = SharedRandom()


def init_random(seed: int | None = None) -> None:
    """Seed the shared generator once at startup. Defaults to the current time."""
    _shared.seed(time.time_ns() if seed is None else seed)


def get_random() -> SharedRandom:
    return _shared
