[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tokweave"
version = "0.1.0"
description = "Parser combinators with spans, token streams, recursion, error recovery and text helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["parser", "combinator", "parsing", "lexer", "error recovery"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: General",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tokweave"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
