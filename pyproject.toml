[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgwire"
version = "0.1.0"
description = "PostgreSQL wire protocol building blocks: message buffers, array text codecs and frontend message helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["postgresql", "postgres", "wire-protocol", "arrays", "database"]
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
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pgwire"]

[tool.pytest.ini_options]
addopts = "-ra"
