[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "demogobbler"
version = "0.1.0"
description = "Bit-level readers and writers, an arena, hash tables and buffered readers for Source engine demo data"
requires-python = ">=3.10"
dependencies = []
keywords = ["demo", "source-engine", "bitstream", "bitwriter", "binary", "arena"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["demogobbler"]

[tool.pytest.ini_options]
addopts = "-ra"
