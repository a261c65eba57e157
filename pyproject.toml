[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orogen"
version = "0.1.0"
description = "In-memory state machines for operator slashing, treasury spend proposals and stake-weighted Yuma consensus scoring."
requires-python = ">=3.10"
dependencies = []
keywords = ["consensus", "slashing", "treasury", "yuma", "staking", "governance"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["orogen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
