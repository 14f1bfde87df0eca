"""Terminal browser for Claude Code sessions, with helpers to read, search, export and delete them."""

__version__ = "0.1.0"