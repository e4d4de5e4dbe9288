"""Feature normalization: data containers, batch normalization and a strategy engine."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterable

import numpy as np

__all__ = [
    "NormalizationType",
    "NormalizationConfig",
    "NormalizationData",
    "PerformanceStats",
    "NormalizationStrategy",
    "BatchNormalization",
    "NormalizationEngine",
    "create_normalization_engine",
    "MAX_NORMALIZATION_TYPES",
]

MAX_NORMALIZATION_TYPES = 8


class NormalizationType(IntEnum):
    """Kinds of normalization an engine can dispatch to."""

    BATCH = 0
    LAYER = 1
    INSTANCE = 2
    GROUP = 3


def _empty() -> np.ndarray:
    return np.zeros(0, dtype=float)


def _resized(values: np.ndarray, size: int, fill: float = 0.0) -> np.ndarray:
    """Keep the first ``size`` values, padding with ``fill`` when growing."""
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size >= size:
        return arr[:size].copy()
    return np.concatenate([arr, np.full(size - arr.size, fill, dtype=float)])


@dataclass
class NormalizationConfig:
    """Shape of the data and numerical settings."""

    batch_size: int = 0
    feature_size: int = 0
    epsilon: float = 1e-5
    use_global_stats: bool = False


@dataclass
class NormalizationData:
    """Row-major input and output buffers with per-feature caches and affine factors.

    Empty ``scale_factors`` mean a scale of one and empty ``offset_factors``
    an offset of zero.
    """

    input_data: np.ndarray = field(default_factory=_empty)
    output_data: np.ndarray = field(default_factory=_empty)
    mean_cache: np.ndarray = field(default_factory=_empty)
    variance_cache: np.ndarray = field(default_factory=_empty)
    scale_factors: np.ndarray = field(default_factory=_empty)
    offset_factors: np.ndarray = field(default_factory=_empty)
    config: NormalizationConfig = field(default_factory=NormalizationConfig)

    def __post_init__(self) -> None:
        for name in (
            "input_data",
            "output_data",
            "mean_cache",
            "variance_cache",
            "scale_factors",
            "offset_factors",
        ):
            setattr(self, name, np.asarray(getattr(self, name), dtype=float).ravel())

    def resize_for_batch(self, batch_size: int, feature_size: int) -> None:
        """Resize every buffer for a new shape, keeping existing leading values."""
        if batch_size < 0 or feature_size < 0:
            raise ValueError("Sizes must be non-negative")
        self.config.batch_size = batch_size
        self.config.feature_size = feature_size
        total = batch_size * feature_size

        self.input_data = _resized(self.input_data, total)
        self.output_data = _resized(self.output_data, total)
        self.mean_cache = _resized(self.mean_cache, feature_size)
        self.variance_cache = _resized(self.variance_cache, feature_size)
        if len(self.scale_factors):
            self.scale_factors = _resized(self.scale_factors, feature_size, 1.0)
        if len(self.offset_factors):
            self.offset_factors = _resized(self.offset_factors, feature_size, 0.0)

    def clear_caches(self) -> None:
        """Set the cached means and variances to zero."""
        self.mean_cache = np.zeros(len(self.mean_cache), dtype=float)
        self.variance_cache = np.zeros(len(self.variance_cache), dtype=float)

    def is_valid(self) -> bool:
        """Whether all buffers are sized for the configured shape."""
        expected = self.config.batch_size * self.config.feature_size
        return (
            len(self.input_data) == expected
            and len(self.output_data) == expected
            and len(self.mean_cache) == self.config.feature_size
            and len(self.variance_cache) == self.config.feature_size
        )


@dataclass
class PerformanceStats:
    """Accumulated timings of one strategy."""

    total_time_us: float = 0.0
    avg_time_per_iteration_us: float = 0.0
    throughput_elements_per_second: float = 0.0
    iterations: int = 0
    batch_size: int = 0
    feature_size: int = 0


class NormalizationStrategy(ABC):
    """One way of normalizing a :class:`NormalizationData`."""

    @abstractmethod
    def normalize(self, data: NormalizationData) -> None:
        """Fill ``data.output_data`` from ``data.input_data``."""

    @abstractmethod
    def name(self) -> str:
        """Name of the strategy."""

    def requires_global_stats(self) -> bool:
        return False

    def supports_inplace(self) -> bool:
        return False

    def validate_input(self, data: NormalizationData) -> bool:
        """Whether ``data`` has a usable shape and consistent buffers."""
        cfg = data.config
        if cfg.batch_size <= 0 or cfg.feature_size <= 0 or not data.is_valid():
            return False
        for factors in (data.scale_factors, data.offset_factors):
            if len(factors) not in (0, cfg.feature_size):
                return False
        return True

    def estimate_complexity(self, data: NormalizationData) -> int:
        """Rough work estimate: the number of elements processed."""
        return data.config.batch_size * data.config.feature_size


class BatchNormalization(NormalizationStrategy):
    """Normalizes every feature with the mean and variance taken over the batch."""

    def normalize(self, data: NormalizationData) -> None:
        if not self.validate_input(data):
            raise ValueError("Normalization data is not valid for its configuration")
        cfg = data.config
        x = np.asarray(data.input_data, dtype=float).reshape(cfg.batch_size, cfg.feature_size)

        mean = x.mean(axis=0)
        variance = ((x - mean) ** 2).mean(axis=0)
        data.mean_cache = mean
        data.variance_cache = variance

        scale = data.scale_factors if len(data.scale_factors) else np.ones(cfg.feature_size)
        offset = data.offset_factors if len(data.offset_factors) else np.zeros(cfg.feature_size)
        out = scale * (x - mean) / np.sqrt(variance + cfg.epsilon) + offset
        data.output_data = out.ravel()

    def name(self) -> str:
        return "BatchNormalization"

    def requires_global_stats(self) -> bool:
        return True

    def supports_inplace(self) -> bool:
        return True


StrategyFactory = Callable[[], NormalizationStrategy]


class NormalizationEngine:
    """Dispatches normalization requests to lazily created, cached strategies."""

    def __init__(self) -> None:
        self._factories: dict[NormalizationType, StrategyFactory] = {
            NormalizationType.BATCH: BatchNormalization,
        }
        self._cache: dict[NormalizationType, NormalizationStrategy] = {}
        self._stats: dict[NormalizationType, PerformanceStats] = {
            kind: PerformanceStats() for kind in NormalizationType
        }

    def _strategy(self, kind: NormalizationType) -> NormalizationStrategy | None:
        try:
            kind = NormalizationType(kind)
        except ValueError:
            return None
        strategy = self._cache.get(kind)
        if strategy is None:
            factory = self._factories.get(kind)
            if factory is None:
                return None
            strategy = self._cache[kind] = factory()
        return strategy

    def normalize(self, kind: NormalizationType, data: NormalizationData) -> bool:
        """Normalize ``data`` with the strategy for ``kind``; False if none applies."""
        strategy = self._strategy(kind)
        if strategy is None or not strategy.validate_input(data):
            return False

        start = time.perf_counter()
        strategy.normalize(data)
        elapsed_us = (time.perf_counter() - start) * 1e6

        stats = self._stats[NormalizationType(kind)]
        stats.total_time_us += elapsed_us
        stats.iterations += 1
        stats.batch_size = data.config.batch_size
        stats.feature_size = data.config.feature_size
        stats.avg_time_per_iteration_us = stats.total_time_us / stats.iterations
        elements = float(stats.batch_size * stats.feature_size)
        if stats.avg_time_per_iteration_us > 0.0:
            stats.throughput_elements_per_second = (
                elements * 1_000_000.0 / stats.avg_time_per_iteration_us
            )
        else:
            stats.throughput_elements_per_second = float("inf")
        return True

    def normalize_batch(
        self, items: Iterable[tuple[NormalizationType, NormalizationData]]
    ) -> bool:
        """Normalize every pair; True only if all succeeded."""
        results = [self.normalize(kind, data) for kind, data in items]
        return all(results)

    def strategy_name(self, kind: NormalizationType) -> str:
        strategy = self._strategy(kind)
        return strategy.name() if strategy is not None else "Unknown"

    def strategy_supports_inplace(self, kind: NormalizationType) -> bool:
        strategy = self._strategy(kind)
        return strategy.supports_inplace() if strategy is not None else False

    def strategy_requires_global_stats(self, kind: NormalizationType) -> bool:
        strategy = self._strategy(kind)
        return strategy.requires_global_stats() if strategy is not None else False

    def estimate_complexity(self, kind: NormalizationType, data: NormalizationData) -> int:
        strategy = self._strategy(kind)
        return strategy.estimate_complexity(data) if strategy is not None else 0

    def performance_stats(self, kind: NormalizationType) -> PerformanceStats:
        return self._stats[NormalizationType(kind)]

    def reset_performance_stats(self) -> None:
        for kind in self._stats:
            self._stats[kind] = PerformanceStats()

    def register_strategy(self, kind: NormalizationType, factory: StrategyFactory) -> None:
        """Use ``factory`` for ``kind`` from now on, dropping any cached strategy."""
        kind = NormalizationType(kind)
        self._factories[kind] = factory
        self._cache.pop(kind, None)

    def preload_strategies(self, kinds: Iterable[NormalizationType]) -> None:
        for kind in kinds:
            self._strategy(kind)

    def preload_all_strategies(self) -> None:
        self.preload_strategies(NormalizationType)

    def performance_summary(self) -> str:
        """Text summary of the strategies that have been used."""
        lines = ["", "=== Normalization Performance Summary ==="]
        for kind in NormalizationType:
            stats = self._stats[kind]
            if stats.iterations > 0:
                lines.extend(
                    [
                        f"{kind.name.capitalize()} Normalization:",
                        f"  Strategy: {self.strategy_name(kind)}",
                        f"  Iterations: {stats.iterations}",
                        f"  Avg Time: {stats.avg_time_per_iteration_us} μs",
                        f"  Throughput: {stats.throughput_elements_per_second} elements/sec",
                        f"  Last Batch Size: {stats.batch_size}x{stats.feature_size}",
                        "",
                    ]
                )
        return "\n".join(lines) + "\n"

    def auto_select_best_strategy(self, data: NormalizationData) -> NormalizationType:
        """Pick a strategy from the shape of ``data``."""
        batch = data.config.batch_size
        features = data.config.feature_size
        total = batch * features
        if batch > 1 and total > 10000:
            return NormalizationType.BATCH
        if features > 512:
            return NormalizationType.LAYER
        if batch == 1:
            return NormalizationType.INSTANCE
        return NormalizationType.LAYER

    def normalize_auto(self, data: NormalizationData) -> bool:
        return self.normalize(self.auto_select_best_strategy(data), data)


def create_normalization_engine() -> NormalizationEngine:
    """An engine with every available strategy already created."""
    engine = NormalizationEngine()
    engine.preload_all_strategies()
    return engine