"""Benchmarking of normalization strategies with text tables and reports."""

from __future__ import annotations

import math
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np

from drlcore.normalization import (
    NormalizationData,
    NormalizationEngine,
    NormalizationType,
    create_normalization_engine,
)

__all__ = ["ProfileResult", "PerformanceProfiler", "quick_benchmark"]

_ELEMENT_BYTES = np.dtype(float).itemsize
_RULE = "=" * 80
_DASHES = "-" * 80


@dataclass
class ProfileResult:
    """Timings of one strategy on one data shape, in microseconds."""

    strategy_name: str
    kind: NormalizationType
    batch_size: int
    feature_size: int
    iterations: int
    total_time_us: float = 0.0
    avg_time_us: float = 0.0
    min_time_us: float = 0.0
    max_time_us: float = 0.0
    std_dev_us: float = 0.0
    throughput_elements_per_sec: float = 0.0
    memory_bandwidth_gb_per_sec: float = 0.0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0.0:
        return math.inf if numerator > 0.0 else 0.0
    return numerator / denominator


class PerformanceProfiler:
    """Runs normalization strategies on random data and records their timings."""

    def __init__(
        self,
        seed: int | None = None,
        engine: NormalizationEngine | None = None,
    ) -> None:
        self.engine = engine if engine is not None else create_normalization_engine()
        self._rng = np.random.default_rng(seed)
        self._history: list[ProfileResult] = []

    @property
    def history(self) -> list[ProfileResult]:
        """Every result recorded since the last :meth:`clear_history`."""
        return list(self._history)

    def _setup_test_data(self, batch_size: int, feature_size: int) -> NormalizationData:
        data = NormalizationData()
        data.resize_for_batch(batch_size, feature_size)
        data.input_data = self._rng.normal(0.0, 1.0, batch_size * feature_size)
        if self._rng.integers(0, 2) == 0:
            data.scale_factors = 0.5 + self._rng.normal(0.0, 1.0, feature_size) * 0.5
            data.offset_factors = self._rng.normal(0.0, 1.0, feature_size) * 0.1
        return data

    def benchmark_strategy(
        self,
        kind: NormalizationType,
        batch_size: int,
        feature_size: int,
        iterations: int = 1000,
        verbose: bool = True,
    ) -> ProfileResult:
        """Time ``iterations`` normalizations after ten warm-up runs."""
        if iterations <= 0:
            raise ValueError("iterations must be positive")
        result = ProfileResult(
            strategy_name=self.engine.strategy_name(kind),
            kind=NormalizationType(kind),
            batch_size=batch_size,
            feature_size=feature_size,
            iterations=iterations,
        )
        data = self._setup_test_data(batch_size, feature_size)

        for _ in range(10):
            self.engine.normalize(kind, data)

        times: list[float] = []
        total_start = time.perf_counter()
        for i in range(iterations):
            start = time.perf_counter()
            if not self.engine.normalize(kind, data):
                print(f"Normalization failed at iteration {i}", file=sys.stderr)
                break
            times.append((time.perf_counter() - start) * 1e6)
        total_end = time.perf_counter()

        result.total_time_us = (total_end - total_start) * 1e6
        result.avg_time_us = result.total_time_us / iterations
        if times:
            result.min_time_us = min(times)
            result.max_time_us = max(times)
            spread = sum((t - result.avg_time_us) ** 2 for t in times)
            result.std_dev_us = math.sqrt(spread / iterations)

        elements = float(batch_size * feature_size)
        result.throughput_elements_per_sec = _ratio(elements * 1e6, result.avg_time_us)
        bytes_per_iteration = elements * _ELEMENT_BYTES * 2
        result.memory_bandwidth_gb_per_sec = _ratio(
            bytes_per_iteration * 1e6, result.avg_time_us * 1e9
        )

        self._history.append(result)
        if verbose:
            self._print_result(result)
        return result

    def benchmark_all_strategies(
        self, batch_size: int, feature_size: int, iterations: int = 1000
    ) -> list[ProfileResult]:
        """Benchmark every normalization type; results come back fastest first."""
        print()
        print(_RULE)
        print("COMPREHENSIVE NORMALIZATION BENCHMARK")
        print(f"Batch Size: {batch_size}, Feature Size: {feature_size}")
        print(f"Iterations: {iterations}")
        print(_RULE)
        print()

        results = []
        for kind in NormalizationType:
            print(f"Benchmarking {self.engine.strategy_name(kind)}...")
            results.append(
                self.benchmark_strategy(kind, batch_size, feature_size, iterations, False)
            )
            print("✓ Completed\n")

        print()
        print(_DASHES)
        print("PERFORMANCE COMPARISON")
        print(_DASHES)
        results.sort(key=lambda r: r.avg_time_us)
        print(
            f"{'Strategy':<20}{'Avg Time(μs)':<12}{'Throughput(M/s)':<15}"
            f"{'Bandwidth(GB/s)':<15}{'Speedup':<10}"
        )
        print(_DASHES)
        baseline = results[0].avg_time_us
        for r in results:
            speedup = _ratio(baseline, r.avg_time_us) if r.avg_time_us else 1.0
            print(
                f"{r.strategy_name:<20}{r.avg_time_us:<12.2f}"
                f"{r.throughput_elements_per_sec / 1e6:<15.1f}"
                f"{r.memory_bandwidth_gb_per_sec:<15.2f}{speedup:<10.2f}x"
            )
        return results

    def benchmark_scaling(
        self,
        kind: NormalizationType,
        sizes: Sequence[tuple[int, int]],
        iterations: int = 500,
    ) -> list[ProfileResult]:
        """Benchmark one strategy over several (batch, feature) shapes."""
        print()
        print(_RULE)
        print(f"SCALING BENCHMARK - {self.engine.strategy_name(kind)}")
        print(_RULE)
        print()
        print(
            f"{'Batch':<10}{'Features':<10}{'Elements':<12}{'Time(μs)':<12}"
            f"{'Throughput(M/s)':<15}{'Efficiency':<15}"
        )
        print(_DASHES)

        results: list[ProfileResult] = []
        for batch_size, feature_size in sizes:
            result = self.benchmark_strategy(kind, batch_size, feature_size, iterations, False)
            results.append(result)
            baseline = results[0]
            elements = batch_size * feature_size
            baseline_elements = baseline.batch_size * baseline.feature_size
            efficiency = _ratio(
                baseline.throughput_elements_per_sec, result.throughput_elements_per_sec
            ) * _ratio(float(elements), float(baseline_elements))
            print(
                f"{batch_size:<10}{feature_size:<10}{elements:<12}"
                f"{result.avg_time_us:<12.2f}"
                f"{result.throughput_elements_per_sec / 1e6:<15.1f}"
                f"{efficiency:<15.3f}"
            )
        return results

    def generate_report(
        self, filename: str | Path = "normalization_benchmark_report.txt"
    ) -> Path:
        """Write the recorded results, grouped by strategy, to ``filename``."""
        path = Path(filename)
        lines = [
            "DEEP QN NORMALIZATION SYSTEM - PERFORMANCE REPORT",
            f"Generated: {time.time_ns()}",
            _RULE,
            "",
            "SYSTEM INFORMATION:",
            f"- Data Type: double ({_ELEMENT_BYTES} bytes)",
            "",
        ]
        grouped: dict[NormalizationType, list[ProfileResult]] = {}
        for result in self._history:
            grouped.setdefault(result.kind, []).append(result)

        for kind in sorted(grouped):
            results = grouped[kind]
            lines.append(f"STRATEGY: {results[0].strategy_name}")
            lines.append("-" * 50)
            for r in results:
                lines.extend(
                    [
                        f"Configuration: {r.batch_size}x{r.feature_size}"
                        f" ({r.iterations} iterations)",
                        f"  Average Time: {r.avg_time_us:.2f} μs",
                        f"  Min/Max Time: {r.min_time_us:.2f}/{r.max_time_us:.2f} μs",
                        f"  Std Deviation: {r.std_dev_us:.2f} μs",
                        f"  Throughput: {r.throughput_elements_per_sec / 1e6:.1f}"
                        " M elements/sec",
                        f"  Memory Bandwidth: {r.memory_bandwidth_gb_per_sec:.2f} GB/sec",
                        "",
                    ]
                )

        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        print(f"Report saved to: {path}")
        return path

    def clear_history(self) -> None:
        """Forget recorded results and reset the engine's statistics."""
        self._history.clear()
        self.engine.reset_performance_stats()

    @staticmethod
    def _print_result(r: ProfileResult) -> None:
        print(f"Strategy: {r.strategy_name}")
        print(f"Configuration: {r.batch_size}x{r.feature_size} ({r.iterations} iterations)")
        print(f"Average Time: {r.avg_time_us:.2f} μs")
        print(f"Min/Max Time: {r.min_time_us:.2f}/{r.max_time_us:.2f} μs")
        print(f"Throughput: {r.throughput_elements_per_sec / 1e6:.1f} M elements/sec")
        print(f"Memory Bandwidth: {r.memory_bandwidth_gb_per_sec:.2f} GB/sec")
        print()


def quick_benchmark() -> None:
    """Compare all strategies on a range of sizes and write the default report."""
    profiler = PerformanceProfiler()
    for batch, features in ((32, 256), (64, 512), (128, 1024), (256, 2048)):
        print(f"\n--- Benchmark {batch}x{features} ---")
        profiler.benchmark_all_strategies(batch, features, 100)
    profiler.generate_report()