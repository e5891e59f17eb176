[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cirbinius"
version = "0.1.0"
description = "Hash-sealed proof artifacts and reports, an in-memory job store, and small helpers for a circuit-compilation job API"
requires-python = ">=3.10"
dependencies = []
keywords = ["circuits", "r1cs", "binius", "zero-knowledge", "proof-artifacts", "sha256", "job-store", "rate-limiting"]
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
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cirbinius"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
