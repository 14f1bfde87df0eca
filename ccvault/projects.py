"""Discovery of the projects that have recorded sessions."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from itertools import islice
from pathlib import Path

from .config import claude_dir
from .sessions import _LINE_LIMIT, _read_lines

_CWD_SCAN_LINES = 5


@dataclass
class Project:
    """A directory under ``~/.claude/projects`` and the path it stands for."""

    encoded_name: str
    full_path: str
    display_path: str
    last_modified: int = 0


def decode_path(encoded: str) -> str:
    """Turn an encoded directory name back into an absolute path."""
    if encoded.startswith("-"):
        encoded = "/" + encoded[1:]
    return encoded.replace("-", "/")


def shorten_path(full_path: str) -> str:
    """Replace the home directory prefix of a path with ``~``."""
    home = str(Path.home())
    if full_path.startswith(home):
        return "~" + full_path[len(home):]
    return full_path


def _cwd_of(line: bytes) -> str:
    try:
        data = json.loads(line.decode("utf-8", "replace"))
    except ValueError:
        return ""
    if not isinstance(data, dict):
        return ""
    cwd = data.get("cwd")
    return cwd if isinstance(cwd, str) else ""


def read_cwd_from_session(path: str | os.PathLike[str]) -> str:
    """Return the working directory recorded in the first lines of a session."""
    try:
        for line in islice(_read_lines(path, _LINE_LIMIT), _CWD_SCAN_LINES):
            cwd = _cwd_of(line)
            if cwd:
                return cwd
    except OSError:
        return ""
    return ""


def _scan_project_dir(directory: Path) -> tuple[str, int] | None:
    """Return the first session file and the newest session mtime of a project."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return None

    first = ""
    latest = 0
    for entry in entries:
        name = entry.name
        if entry.is_dir(follow_symlinks=False) or not name.endswith(".jsonl") or name.startswith("agent-"):
            continue
        if not first:
            first = str(directory / name)
        try:
            mtime = entry.stat(follow_symlinks=False).st_mtime_ns // 1_000_000_000
        except OSError:
            continue
        latest = max(latest, mtime)
    return first, latest


def discover_projects() -> list[Project]:
    """Scan ``~/.claude/projects`` and return its projects, newest first.

    Raises ``OSError`` when the projects directory cannot be read.
    """
    projects_dir = claude_dir() / "projects"
    with os.scandir(projects_dir) as it:
        entries = sorted(it, key=lambda e: e.name)

    projects = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False):
            continue
        summary = _scan_project_dir(projects_dir / entry.name)
        if summary is None:
            continue
        first_session, latest = summary
        full_path = read_cwd_from_session(first_session) if first_session else ""
        if not full_path:
            full_path = decode_path(entry.name)
        projects.append(
            Project(
                encoded_name=entry.name,
                full_path=full_path,
                display_path=shorten_path(full_path),
                last_modified=latest,
            )
        )

    projects.sort(key=lambda p: p.last_modified, reverse=True)
    return projects


def find_project_index(projects: list[Project], cwd: str) -> int:
    """Return the index of the project whose path is ``cwd``, or 0."""
    return next((i for i, p in enumerate(projects) if p.full_path == cwd), 0)