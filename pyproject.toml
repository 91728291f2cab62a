[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hyperengine"
version = "1.0.0"
description = "Thread-based job system, work-stealing scheduler, concurrent containers and hypergraph canonicalization"
requires-python = ">=3.10"
dependencies = []
keywords = ["hypergraph", "canonicalization", "job-system", "work-stealing", "scheduler", "concurrency"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hyperengine"]

[tool.pytest.ini_options]
addopts = "-ra"
