"""Full-text search over session files and removal of session files."""

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import claude_dir
from .sessions import Session, _read_lines

_SEARCH_LINE_LIMIT = 1024 * 1024


@dataclass
class SearchResult:
    """A session that matched a query and how many of its messages matched."""

    session_index: int
    match_count: int


def _text_blocks(raw: Any) -> list[str] | None:
    """Return the texts of the ``text`` blocks, or ``None`` if not a block list."""
    if not isinstance(raw, list):
        return None
    texts = []
    for block in raw:
        if block is None:
            continue
        if not isinstance(block, dict):
            return None
        kind = block.get("type")
        text = block.get("text")
        if kind is not None and not isinstance(kind, str):
            return None
        if text is not None and not isinstance(text, str):
            return None
        if kind == "text":
            texts.append(text or "")
    return texts


def extract_search_text(raw: Any) -> str:
    """Return the searchable text of a message content value."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict) and "content" in raw:
        raw = raw["content"]
        if raw is None:
            return ""
    texts = _text_blocks(raw)
    if texts is not None:
        return " ".join(texts)
    return json.dumps(raw, ensure_ascii=False, separators=(",", ":"))


def _searchable_text(line: str) -> str | None:
    """Return the text of a conversation line, or ``None`` if it is not one."""
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    kind = data.get("type")
    is_meta = data.get("isMeta")
    message = data.get("message")
    if kind is not None and not isinstance(kind, str):
        return None
    if is_meta is not None and not isinstance(is_meta, bool):
        return None
    if message is not None:
        if not isinstance(message, dict):
            return None
        role = message.get("role")
        if role is not None and not isinstance(role, str):
            return None
    if kind not in ("user", "assistant") or is_meta or message is None:
        return None
    return extract_search_text(message.get("content"))


def search_in_file(file_path: str | os.PathLike[str], query: str) -> int:
    """Count the messages of a session file whose text contains ``query``.

    ``query`` is expected in lower case.
    """
    count = 0
    try:
        for raw in _read_lines(file_path, _SEARCH_LINE_LIMIT):
            line = raw.decode("utf-8", "replace")
            if query not in line.lower():
                continue
            text = _searchable_text(line)
            if text is not None and query in text.lower():
                count += 1
    except OSError:
        return count
    return count


def search_sessions(sessions: list[Session], query: str) -> list[SearchResult]:
    """Search the files of ``sessions`` for ``query``, ignoring case."""
    if not query:
        return []
    query = query.lower()
    results = []
    for index, session in enumerate(sessions):
        count = search_in_file(session.file_path, query)
        if count > 0:
            results.append(SearchResult(session_index=index, match_count=count))
    return results


def _remove(path: Path) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def _remove_all(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, ignore_errors=True)
    else:
        _remove(path)


def _entries(directory: Path) -> list[str]:
    try:
        return sorted(os.listdir(directory))
    except OSError:
        return []


def delete_session_files(session: Session) -> None:
    """Remove the transcript of a session and every file kept alongside it."""
    base = claude_dir()
    session_file = Path(session.file_path)
    _remove(session_file)

    project_dir = session_file.parent
    for name in _entries(project_dir):
        if name.startswith("agent-") and session.id in name:
            _remove(project_dir / name)
    _remove_all(project_dir / session.id)

    _remove(base / "debug" / f"{session.id}.txt")
    _remove_all(base / "file-history" / session.id)
    _remove_all(base / "session-env" / session.id)

    todos_dir = base / "todos"
    for name in _entries(todos_dir):
        if name.startswith(session.id):
            _remove(todos_dir / name)