"""Shared execution settings: random numbers, parallelism hints and a step cache."""

from __future__ import annotations

import math
import os
import random
import threading

__all__ = ["ExecutionContext"]


class ExecutionContext:
    """Thread-safe random number source, parallel settings and a (step, key) value cache."""

    def __init__(
        self,
        enable_parallel: bool = True,
        threads: int = -1,
        seed: int | None = None,
    ) -> None:
        self.parallel_enabled = enable_parallel
        self.num_threads = threads if threads > 0 else (os.cpu_count() or 1)
        self._random = random.Random(seed)
        self._random_lock = threading.Lock()
        self._cache: dict[tuple[int, str], float] = {}
        self._cache_lock = threading.Lock()

    def normal_random(self) -> float:
        """A sample from the standard normal distribution."""
        with self._random_lock:
            return self._random.gauss(0.0, 1.0)

    def uniform_random(self, low: float = 0.0, high: float = 1.0) -> float:
        """A sample from the uniform distribution on [low, high)."""
        with self._random_lock:
            return self._random.uniform(low, high)

    def get_cached(self, step: int, key: str) -> float:
        """The cached value for (step, key), or NaN when there is none."""
        with self._cache_lock:
            return self._cache.get((step, key), math.nan)

    def set_cached(self, step: int, key: str, value: float) -> None:
        """Store ``value`` under (step, key), replacing any earlier value."""
        with self._cache_lock:
            self._cache[(step, key)] = value

    def clear_cache(self) -> None:
        """Drop every cached value."""
        with self._cache_lock:
            self._cache.clear()

    def cache_size(self) -> int:
        """Number of cached entries."""
        with self._cache_lock:
            return len(self._cache)

    def has_cached(self, step: int, key: str) -> bool:
        """Whether a value is cached under (step, key)."""
        with self._cache_lock:
            return (step, key) in self._cache

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(parallel={self.parallel_enabled}, "
            f"threads={self.num_threads}, cached={self.cache_size()})"
        )