"""A small dense tensor of up to four dimensions, and a bounded batch of tensors."""

from __future__ import annotations

import math
from typing import Callable, Iterable, Iterator, Sequence

import numpy as np

__all__ = ["Tensor", "TensorBatch", "MAX_DIMS"]

MAX_DIMS = 4

_rng = np.random.default_rng()


class Tensor:
    """Zero-initialised row-major tensor of floats with at most ``MAX_DIMS`` dimensions."""

    def __init__(self, shape: Iterable[int] | None = None) -> None:
        self._shape: tuple[int, ...] = ()
        self._data = np.zeros(0, dtype=float)
        if shape is not None:
            self.reshape(shape)

    def reshape(self, shape: Iterable[int]) -> None:
        """Give the tensor a new shape; all values are reset to zero."""
        new_shape = tuple(int(d) for d in shape)
        if len(new_shape) > MAX_DIMS:
            raise ValueError("Too many dimensions")
        if any(d < 0 for d in new_shape):
            raise ValueError("Dimensions must be non-negative")
        self._shape = new_shape
        self._data = np.zeros(math.prod(new_shape), dtype=float)

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def dims(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return int(self._data.size)

    @property
    def data(self) -> np.ndarray:
        """Flat view of the values in row-major order."""
        return self._data

    def copy(self) -> Tensor:
        """An independent tensor with the same shape and values."""
        result = Tensor()
        result._shape = self._shape
        result._data = self._data.copy()
        return result

    def _position(self, index: int | Sequence[int]) -> int:
        if isinstance(index, (int, np.integer)):
            flat = int(index)
            if not 0 <= flat < self.size:
                raise IndexError(f"Index {flat} out of range for size {self.size}")
            return flat
        indices = tuple(int(i) for i in index)
        if len(indices) != self.dims:
            raise IndexError("Dimension mismatch")
        if self.size == 0:
            raise IndexError("Tensor is empty")
        for i, extent in zip(indices, self._shape):
            if not 0 <= i < extent:
                raise IndexError(f"Index {indices} out of range for shape {self._shape}")
        return int(np.ravel_multi_index(indices, self._shape)) if indices else 0

    def __getitem__(self, index: int | Sequence[int]) -> float:
        return float(self._data[self._position(index)])

    def __setitem__(self, index: int | Sequence[int], value: float) -> None:
        self._data[self._position(index)] = value

    def __iadd__(self, other: Tensor) -> Tensor:
        if self.size != other.size:
            raise ValueError("Size mismatch for addition")
        self._data += other._data
        return self

    def __imul__(self, scalar: float) -> Tensor:
        self._data *= float(scalar)
        return self

    def apply(self, func: Callable[[float], float]) -> Tensor:
        """Replace every value by ``func(value)``; returns the tensor itself."""
        self._data[:] = [func(float(x)) for x in self._data]
        return self

    def matmul(self, other: Tensor) -> Tensor:
        """Matrix product of two 2-D tensors."""
        if self.dims != 2 or other.dims != 2:
            raise ValueError("matmul requires 2D tensors")
        if self._shape[1] != other._shape[0]:
            raise ValueError("Incompatible dimensions for matmul")
        result = Tensor((self._shape[0], other._shape[1]))
        product = self._data.reshape(self._shape) @ other._data.reshape(other._shape)
        result._data[:] = product.ravel()
        return result

    def __matmul__(self, other: Tensor) -> Tensor:
        return self.matmul(other)

    def mean(self) -> float:
        """Arithmetic mean of all values (NaN for an empty tensor)."""
        if self.size == 0:
            return math.nan
        return float(self._data.sum() / self.size)

    def variance(self) -> float:
        """Population variance of all values (NaN for an empty tensor)."""
        if self.size == 0:
            return math.nan
        m = self.mean()
        return float(((self._data - m) ** 2).sum() / self.size)

    def norm(self) -> float:
        """Euclidean norm of all values."""
        return float(math.sqrt(float((self._data * self._data).sum())))

    def fill(self, value: float) -> None:
        self._data.fill(value)

    def random_normal(self, mean: float = 0.0, stddev: float = 1.0) -> None:
        """Fill with samples from a normal distribution."""
        self._data[:] = _rng.normal(mean, stddev, self.size)

    def xavier_init(self, fan_in: int, fan_out: int) -> None:
        """Fill uniformly in [-limit, limit] with limit = sqrt(6 / (fan_in + fan_out))."""
        if fan_in + fan_out <= 0:
            raise ValueError("fan_in + fan_out must be positive")
        limit = math.sqrt(6.0 / (fan_in + fan_out))
        self._data[:] = _rng.uniform(-limit, limit, self.size)

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape}, data={self._data.tolist()})"


class TensorBatch:
    """A sequence of tensors that holds at most ``batch_size`` entries."""

    def __init__(self, batch_size: int) -> None:
        self.batch_size = batch_size
        self._tensors: list[Tensor] = []

    def add(self, tensor: Tensor) -> None:
        if len(self._tensors) >= self.batch_size:
            raise RuntimeError("Batch is full")
        self._tensors.append(tensor)

    def __len__(self) -> int:
        return len(self._tensors)

    def __getitem__(self, index: int) -> Tensor:
        return self._tensors[index]

    def __iter__(self) -> Iterator[Tensor]:
        return iter(self._tensors)