"""Experience records and the common interface of experience replay buffers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, Sequence, TypeVar

__all__ = [
    "Experience",
    "BufferConfig",
    "AbstractBuffer",
    "BufferAdapter",
    "DEFAULT_PRIORITY",
    "EXECUTION_POLICIES",
]

DEFAULT_PRIORITY = 0.1

EXECUTION_POLICIES = ("sequential", "parallel", "parallel_unsequenced")

State = TypeVar("State")
Action = TypeVar("Action")

SampleResult = tuple[list["Experience[Any, Any]"], list[int], list[float]]


@dataclass
class Experience(Generic[State, Action]):
    """One environment transition."""

    state: State
    action: Action
    reward: float
    next_state: State
    done: bool
    info: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class BufferConfig:
    """Tuning options for a replay buffer implementation."""

    chunk_size: int = 1024
    use_threading: bool = True
    use_persistence: bool = False
    execution_policy: str = "parallel"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.execution_policy not in EXECUTION_POLICIES:
            raise ValueError(
                f"Unknown execution policy {self.execution_policy!r}; "
                f"expected one of {', '.join(EXECUTION_POLICIES)}"
            )


class AbstractBuffer(ABC):
    """Interface shared by all experience replay buffers."""

    @abstractmethod
    def add(self, experience: Experience, priority: float = DEFAULT_PRIORITY) -> None:
        """Store ``experience`` with the given priority."""

    @abstractmethod
    def sample(self, batch_size: int) -> SampleResult:
        """Return sampled experiences, their buffer indices and their sampling weights."""

    @abstractmethod
    def update_priorities(self, indices: Sequence[int], priorities: Sequence[float]) -> None:
        """Give the experiences at ``indices`` new priorities."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored experiences."""


class _BufferImpl(Protocol):
    def add(self, experience: Experience, priority: float) -> None: ...

    def sample(self, batch_size: int) -> SampleResult: ...

    def update_priorities(
        self, indices: Sequence[int], priorities: Sequence[float]
    ) -> None: ...

    def __len__(self) -> int: ...


class BufferAdapter(AbstractBuffer):
    """Presents any object with the buffer methods through :class:`AbstractBuffer`."""

    def __init__(self, impl: _BufferImpl) -> None:
        self.impl = impl

    def add(self, experience: Experience, priority: float = DEFAULT_PRIORITY) -> None:
        self.impl.add(experience, priority)

    def sample(self, batch_size: int) -> SampleResult:
        return self.impl.sample(batch_size)

    def update_priorities(self, indices: Sequence[int], priorities: Sequence[float]) -> None:
        self.impl.update_priorities(indices, priorities)

    def __len__(self) -> int:
        return len(self.impl)

    def __repr__(self) -> str:
        return f"BufferAdapter({self.impl!r}, size={len(self)})"