[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "umdhkit"
version = "1.0.0"
description = "Capture UMDH heap snapshots, then filter, sort and summarise the leak reports they produce"
requires-python = ">=3.10"
dependencies = []
keywords = ["umdh", "heap", "memory leak", "snapshot", "stack trace", "debugging"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
umdhkit = "umdhkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["umdhkit"]

[tool.hatch.build.targets.sdist]
include = ["umdhkit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
