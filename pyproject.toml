[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "actorkit"
version = "0.1.0"
description = "Poll-driven actor framework: actor-aware futures and streams, mailboxes, supervision and buffered writers"
requires-python = ">=3.10"
dependencies = []
keywords = ["actor", "actors", "futures", "streams", "supervisor", "mailbox", "polling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["actorkit"]

[tool.hatch.build.targets.sdist]
include = ["actorkit", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
