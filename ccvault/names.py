"""Custom session names kept in ``~/.claude/session-names.json``."""

from __future__ import annotations

import json
import threading
from pathlib import Path

_lock = threading.Lock()


def names_file() -> Path:
    """Return the path of the session names file."""
    return Path.home() / ".claude" / "session-names.json"


def load_names() -> dict[str, str]:
    """Read the names file; a missing or malformed file gives an empty map."""
    with _lock:
        try:
            raw = names_file().read_bytes()
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw.decode("utf-8", "replace"))
        except ValueError:
            return {}
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            return {}
        return dict(data)


def save_names(names: dict[str, str]) -> None:
    """Write the names file, creating its directory if needed."""
    with _lock:
        data = json.dumps(names, indent=2, sort_keys=True, ensure_ascii=False)
        path = names_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")


def set_name(session_id: str, name: str) -> None:
    """Set the custom name of a session."""
    names = load_names()
    names[session_id] = name
    save_names(names)


def delete_name(session_id: str) -> None:
    """Remove the custom name of a session."""
    names = load_names()
    names.pop(session_id, None)
    save_names(names)