# drlcore

Small building blocks for deep reinforcement learning experiments, built on
NumPy.

## Modules

- `drlcore.activation` — activation functions `ReLUActivation`,
  `LeakyReLUActivation`, `ELUActivation`, `TanhActivation`,
  `SigmoidActivation`, `SwishActivation`, `GELUActivation` and
  `MishActivation`, all derived from `ActivationBase`. Each gives scalar
  `activate` / `derivative`, `activate_batch` / `derivative_batch` (returning
  NumPy arrays), `activate_inplace` / `derivative_inplace` (replacing the
  items of a mutable sequence) and output-range metadata such as
  `has_lower_bound()` and `lower_bound()`. `create_activation(ActivationKind.RELU)`
  builds one of four kinds with default parameters; `ActivationRegistry`
  maps names (`"relu"`, `"leaky_relu"`, `"elu"`, `"tanh"`, `"sigmoid"`,
  `"swish"`, `"gelu"`, `"mish"`) to factories and raises `ValueError` for an
  unknown name. `benchmark_activation` returns average per-iteration
  timings as a `BenchmarkResult`.
- `drlcore.execution_context` — `ExecutionContext`, a thread-safe source of
  normal and uniform random numbers (optionally seeded) with a value cache
  keyed by `(step, key)`; `get_cached` returns NaN for a missing entry.
- `drlcore.tensor` — `Tensor`, a zero-initialised row-major tensor of up to
  four dimensions with element access by flat or multi-dimensional index,
  `+=` and `*=`, `apply`, 2-D `matmul` (also `a @ b`), `mean`, `variance`,
  `norm`, `fill`, `random_normal` and `xavier_init`; and `TensorBatch`, which
  raises `RuntimeError` once more than `batch_size` tensors are added.
- `drlcore.normalization` — `NormalizationData` (buffers, caches, optional
  scale and offset factors and a `NormalizationConfig`), the
  `BatchNormalization` strategy and `NormalizationEngine`, which creates
  strategies lazily, records `PerformanceStats` per `NormalizationType`,
  accepts custom strategies through `register_strategy` and can choose a
  type from the data's shape with `auto_select_best_strategy`.
- `drlcore.profiler` — `PerformanceProfiler`, which times strategies on
  random data (`benchmark_strategy`, `benchmark_all_strategies`,
  `benchmark_scaling`), keeps a `history` of `ProfileResult`s and writes a
  text report with `generate_report`. `quick_benchmark()` compares all types
  on four shapes and writes `normalization_benchmark_report.txt` in the
  current directory.
- `drlcore.buffer` — the `Experience` record, `BufferConfig`, the
  `AbstractBuffer` interface (`add`, `sample`, `update_priorities`, `len`)
  and `BufferAdapter`, which puts any object with those methods behind that
  interface.

## Examples

Activations:

```python
from drlcore.activation import ActivationRegistry, SigmoidActivation

sigmoid = SigmoidActivation()
sigmoid.activate(0.0)            # 0.5
sigmoid.derivative(0.0)          # 0.25
sigmoid.activate_batch([-1.0, 0.0, 1.0])

registry = ActivationRegistry()
leaky = registry.create("leaky_relu", 0.1)
leaky.name()                     # 'LeakyReLU(alpha=0.100000)'
sorted(registry.list_activations())
```

Random numbers and caching:

```python
from drlcore.execution_context import ExecutionContext

ctx = ExecutionContext(True, 4, 42)
ctx.uniform_random(0.0, 1.0)
ctx.set_cached(10, "value", 1.5)
ctx.get_cached(10, "value")      # 1.5
ctx.has_cached(11, "value")      # False
```

Tensors:

```python
from drlcore.tensor import Tensor

a = Tensor([2, 3])
a.fill(1.0)
b = Tensor([3, 2])
b.fill(2.0)
c = a @ b                        # shape (2, 2), every entry 6.0
c[0, 1]                          # 6.0
c.mean()                         # 6.0
```

Normalization:

```python
import numpy as np
from drlcore.normalization import (
    NormalizationData,
    NormalizationType,
    create_normalization_engine,
)

engine = create_normalization_engine()
data = NormalizationData()
data.resize_for_batch(4, 3)
data.input_data = np.arange(12, dtype=float)
engine.normalize(NormalizationType.BATCH, data)   # True
data.output_data                                  # per-feature zero mean
print(engine.performance_summary())
```

Profiling:

```python
from drlcore.normalization import NormalizationType
from drlcore.profiler import PerformanceProfiler

profiler = PerformanceProfiler(seed=0)
result = profiler.benchmark_strategy(NormalizationType.BATCH, 8, 16, 50, False)
result.avg_time_us
```

## What the package does not do

- Only batch normalization is implemented. For `NormalizationType.LAYER`,
  `INSTANCE` and `GROUP` the engine has no strategy unless one is added with
  `register_strategy`: `normalize` returns `False` and `strategy_name`
  returns `"Unknown"`. Since `auto_select_best_strategy` picks those types
  for small batches, `normalize_auto` then returns `False` too.
- There is no replay buffer implementation: `drlcore.buffer` gives the
  interface, the experience record and the adapter, and you bring the
  storage and sampling.
- There is no command-line program; everything is used from Python.

## Tests

The `test` extra installs pytest; the suite lives in `tests/`.