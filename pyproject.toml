[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drlcore"
version = "0.1.0"
description = "Building blocks for deep reinforcement learning: activations, tensors, batch normalization, profiling and a replay buffer interface"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "reinforcement-learning",
    "deep-learning",
    "activation-functions",
    "batch-normalization",
    "replay-buffer",
    "tensor",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["drlcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
