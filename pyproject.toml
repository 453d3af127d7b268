[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quizserver"
version = "0.1.0"
description = "A small multiplayer quiz server over TCP with SQLite-backed player accounts"
requires-python = ">=3.10"
dependencies = []
keywords = ["quiz", "tcp", "server", "game", "sqlite", "asyncio", "sha384"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
quizserver = "quizserver.server:main"

[tool.hatch.build.targets.wheel]
packages = ["quizserver"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
