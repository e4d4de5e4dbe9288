"""Scalar and batch activation functions with derivatives, a registry and a benchmark."""

from __future__ import annotations

import math
import random
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, MutableSequence

import numpy as np

__all__ = [
    "ActivationBase",
    "ReLUActivation",
    "LeakyReLUActivation",
    "ELUActivation",
    "TanhActivation",
    "SigmoidActivation",
    "SwishActivation",
    "GELUActivation",
    "MishActivation",
    "ActivationKind",
    "create_activation",
    "ActivationRegistry",
    "BenchmarkResult",
    "benchmark_activation",
]

_FLOAT_MAX = sys.float_info.max


def _sigmoid(x: float) -> float:
    """Logistic function that does not overflow for large magnitudes."""
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def _softplus(x: float) -> float:
    """log(1 + exp(x)) computed without overflow."""
    return max(x, 0.0) + math.log1p(math.exp(-abs(x)))


def _as_array(values: Iterable[float]) -> np.ndarray:
    if isinstance(values, np.ndarray):
        return values.astype(float, copy=False)
    return np.asarray(list(values), dtype=float)


class ActivationBase(ABC):
    """Common interface of an activation function and its derivative."""

    @abstractmethod
    def activate(self, x: float) -> float:
        """Value of the activation at ``x``."""

    @abstractmethod
    def derivative(self, x: float) -> float:
        """Derivative of the activation at ``x``."""

    @abstractmethod
    def name(self) -> str:
        """Human-readable name including parameters."""

    def activate_batch(self, values: Iterable[float]) -> np.ndarray:
        """Apply the activation to every value, returning a new array."""
        return np.fromiter((self.activate(float(x)) for x in values), dtype=float)

    def derivative_batch(self, values: Iterable[float]) -> np.ndarray:
        """Apply the derivative to every value, returning a new array."""
        return np.fromiter((self.derivative(float(x)) for x in values), dtype=float)

    def activate_inplace(self, values: MutableSequence[float]) -> None:
        """Replace every value by its activation."""
        values[:] = self.activate_batch(values).tolist()

    def derivative_inplace(self, values: MutableSequence[float]) -> None:
        """Replace every value by the derivative at that value."""
        values[:] = self.derivative_batch(values).tolist()

    def is_differentiable(self) -> bool:
        return True

    def has_upper_bound(self) -> bool:
        return False

    def has_lower_bound(self) -> bool:
        return False

    def upper_bound(self) -> float:
        return _FLOAT_MAX

    def lower_bound(self) -> float:
        return -_FLOAT_MAX

    def is_monotonic(self) -> bool:
        return False

    def is_continuous(self) -> bool:
        return True

    def supports_simd(self) -> bool:
        return False

    def is_cheap_to_compute(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()}>"


class ReLUActivation(ActivationBase):
    """max(0, x)."""

    def activate(self, x: float) -> float:
        return max(0.0, x)

    def derivative(self, x: float) -> float:
        return 1.0 if x > 0.0 else 0.0

    def activate_batch(self, values: Iterable[float]) -> np.ndarray:
        return np.maximum(_as_array(values), 0.0)

    def name(self) -> str:
        return "ReLU"

    def has_lower_bound(self) -> bool:
        return True

    def lower_bound(self) -> float:
        return 0.0

    def is_monotonic(self) -> bool:
        return True

    def supports_simd(self) -> bool:
        return True


class LeakyReLUActivation(ActivationBase):
    """x for positive input, alpha * x otherwise."""

    def __init__(self, alpha: float = 0.01) -> None:
        self.alpha = alpha

    def activate(self, x: float) -> float:
        return x if x > 0.0 else self.alpha * x

    def derivative(self, x: float) -> float:
        return 1.0 if x > 0.0 else self.alpha

    def name(self) -> str:
        return f"LeakyReLU(alpha={self.alpha:f})"

    def is_monotonic(self) -> bool:
        return True

    def supports_simd(self) -> bool:
        return True


class ELUActivation(ActivationBase):
    """x for positive input, alpha * (exp(x) - 1) otherwise."""

    def __init__(self, alpha: float = 1.0) -> None:
        self.alpha = alpha

    def activate(self, x: float) -> float:
        return x if x > 0.0 else self.alpha * math.expm1(x)

    def derivative(self, x: float) -> float:
        return 1.0 if x > 0.0 else self.alpha * math.exp(x)

    def activate_batch(self, values: Iterable[float]) -> np.ndarray:
        arr = _as_array(values)
        return np.where(arr > 0.0, arr, self.alpha * np.expm1(np.minimum(arr, 0.0)))

    def name(self) -> str:
        return f"ELU(alpha={self.alpha:f})"

    def has_lower_bound(self) -> bool:
        return True

    def lower_bound(self) -> float:
        return -self.alpha

    def is_cheap_to_compute(self) -> bool:
        return False


class TanhActivation(ActivationBase):
    """Hyperbolic tangent."""

    def activate(self, x: float) -> float:
        return math.tanh(x)

    def derivative(self, x: float) -> float:
        t = math.tanh(x)
        return 1.0 - t * t

    def activate_batch(self, values: Iterable[float]) -> np.ndarray:
        return np.tanh(_as_array(values))

    def name(self) -> str:
        return "Tanh"

    def has_upper_bound(self) -> bool:
        return True

    def has_lower_bound(self) -> bool:
        return True

    def upper_bound(self) -> float:
        return 1.0

    def lower_bound(self) -> float:
        return -1.0

    def is_monotonic(self) -> bool:
        return True

    def supports_simd(self) -> bool:
        return True

    def is_cheap_to_compute(self) -> bool:
        return False


class SigmoidActivation(ActivationBase):
    """Logistic function 1 / (1 + exp(-x))."""

    def activate(self, x: float) -> float:
        return _sigmoid(x)

    def derivative(self, x: float) -> float:
        s = _sigmoid(x)
        return s * (1.0 - s)

    def name(self) -> str:
        return "Sigmoid"

    def has_upper_bound(self) -> bool:
        return True

    def has_lower_bound(self) -> bool:
        return True

    def upper_bound(self) -> float:
        return 1.0

    def lower_bound(self) -> float:
        return 0.0

    def is_monotonic(self) -> bool:
        return True

    def is_cheap_to_compute(self) -> bool:
        return False


class SwishActivation(ActivationBase):
    """x * sigmoid(beta * x)."""

    def __init__(self, beta: float = 1.0) -> None:
        self.beta = beta

    def activate(self, x: float) -> float:
        return x * _sigmoid(self.beta * x)

    def derivative(self, x: float) -> float:
        s = _sigmoid(self.beta * x)
        return s + x * s * (1.0 - s) * self.beta

    def name(self) -> str:
        return f"Swish(beta={self.beta:f})"

    def has_lower_bound(self) -> bool:
        return True

    def lower_bound(self) -> float:
        return 0.0

    def is_cheap_to_compute(self) -> bool:
        return False


class GELUActivation(ActivationBase):
    """Gaussian error linear unit, tanh approximation."""

    SQRT_2_PI = 0.7978845608028654
    COEFF = 0.044715

    def activate(self, x: float) -> float:
        inner = self.SQRT_2_PI * (x + self.COEFF * x * x * x)
        return 0.5 * x * (1.0 + math.tanh(inner))

    def derivative(self, x: float) -> float:
        inner = self.SQRT_2_PI * (x + self.COEFF * x * x * x)
        t = math.tanh(inner)
        sech2 = 1.0 - t * t
        inner_derivative = self.SQRT_2_PI * (1.0 + 3.0 * self.COEFF * x * x)
        return 0.5 * (1.0 + t) + 0.5 * x * sech2 * inner_derivative

    def name(self) -> str:
        return "GELU"

    def is_cheap_to_compute(self) -> bool:
        return False


class MishActivation(ActivationBase):
    """x * tanh(softplus(x))."""

    def activate(self, x: float) -> float:
        return x * math.tanh(_softplus(x))

    def derivative(self, x: float) -> float:
        t = math.tanh(_softplus(x))
        sech2 = 1.0 - t * t
        return t + x * sech2 * _sigmoid(x)

    def name(self) -> str:
        return "Mish"

    def is_cheap_to_compute(self) -> bool:
        return False


class ActivationKind(Enum):
    """Activations that :func:`create_activation` builds with default parameters."""

    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    ELU = "elu"
    TANH = "tanh"


_KIND_CLASSES: dict[ActivationKind, type[ActivationBase]] = {
    ActivationKind.RELU: ReLUActivation,
    ActivationKind.LEAKY_RELU: LeakyReLUActivation,
    ActivationKind.ELU: ELUActivation,
    ActivationKind.TANH: TanhActivation,
}


def create_activation(kind: ActivationKind) -> ActivationBase:
    """Build the activation of the given kind with its default parameters."""
    try:
        cls = _KIND_CLASSES[ActivationKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported activation type: {kind!r}") from None
    return cls()


Creator = Callable[[float], ActivationBase]


class ActivationRegistry:
    """Maps names to factories taking one numeric parameter."""

    def __init__(self) -> None:
        self._registry: dict[str, Creator] = {}
        self.register("relu", lambda _p: ReLUActivation())
        self.register("leaky_relu", lambda p: LeakyReLUActivation(p))
        self.register("elu", lambda p: ELUActivation(p))
        self.register("tanh", lambda _p: TanhActivation())
        self.register("sigmoid", lambda _p: SigmoidActivation())
        self.register("swish", lambda p: SwishActivation(p))
        self.register("gelu", lambda _p: GELUActivation())
        self.register("mish", lambda _p: MishActivation())

    def register(self, name: str, creator: Creator) -> None:
        """Add or replace the factory for ``name``."""
        self._registry[name] = creator

    def create(self, name: str, param: float = 1.0) -> ActivationBase:
        """Build the activation registered as ``name``."""
        try:
            creator = self._registry[name]
        except KeyError:
            raise ValueError(f"Unknown activation: {name}") from None
        return creator(param)

    def list_activations(self) -> list[str]:
        """Names of all registered activations."""
        return list(self._registry)


@dataclass(frozen=True)
class BenchmarkResult:
    """Average per-iteration timings of one activation, in milliseconds."""

    name: str
    forward_time_ms: float
    backward_time_ms: float
    total_time_ms: float


def benchmark_activation(
    activation: ActivationBase,
    data_size: int = 1_000_000,
    iterations: int = 100,
) -> BenchmarkResult:
    """Time batch activation and derivative on reproducible random data."""
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    rng = random.Random(42)
    inputs = np.array([rng.uniform(-0.5, 0.5) for _ in range(data_size)], dtype=float)

    start = time.perf_counter()
    for _ in range(iterations):
        activation.activate_batch(inputs)
    mid = time.perf_counter()
    for _ in range(iterations):
        activation.derivative_batch(inputs)
    end = time.perf_counter()

    forward = (mid - start) * 1000.0
    backward = (end - mid) * 1000.0
    return BenchmarkResult(
        name=activation.name(),
        forward_time_ms=forward / iterations,
        backward_time_ms=backward / iterations,
        total_time_ms=(forward + backward) / iterations,
    )