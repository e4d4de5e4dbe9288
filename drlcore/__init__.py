"""Activations, tensors, batch normalization, profiling and a replay buffer interface."""

__version__ = "0.1.0"

__all__ = [
    "activation",
    "buffer",
    "execution_context",
    "normalization",
    "profiler",
    "tensor",
]