[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fixedtable"
version = "0.1.0"
description = "A small fixed-length record store with primary and secondary indexes, driven from the command line"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "database",
    "fixed-length records",
    "index",
    "secondary index",
    "avail list",
    "csv",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fixedtable = "fixedtable.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fixedtable"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
