[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ccvault"
version = "0.1.0"
description = "Terminal browser for Claude Code sessions: search, preview, rename, export, prune and resume"
requires-python = ">=3.10"
keywords = ["claude", "sessions", "tui", "terminal", "jsonl", "markdown"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]
dependencies = [
    "blessed",
    "wcwidth",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ccvault = "ccvault.app:main"

[tool.hatch.build.targets.wheel]
packages = ["ccvault"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
