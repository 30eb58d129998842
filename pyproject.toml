[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubeutil"
version = "0.1.0"
description = "Small utilities: field paths, environment lookups, a growing ring buffer, clocks, consistent file reads, object diffs, keyed locks and command execution."
requires-python = ">=3.10"
dependencies = []
keywords = ["utilities", "clock", "diff", "ring-buffer", "subprocess", "locks", "environment"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubeutil"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
