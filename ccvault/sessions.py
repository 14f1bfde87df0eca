"""Discovery and parsing of session transcript files."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

from .config import claude_dir

_LINE_LIMIT = 256 * 1024
_QUICK_SCAN_LINES = 30
_TAIL_SIZE = 8192
_TITLE_LIMIT = 60

_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z"
)


@dataclass
class Session:
    """One session transcript of a project."""

    id: str
    project_path: str
    file_path: str
    date: datetime
    conversation_count: int = -1
    title: str = ""
    custom_name: str = ""
    is_pinned: bool = False
    git_branch: str = ""
    selected: bool = False

    def display_name(self) -> str:
        """Return the custom name if set, otherwise the title."""
        return self.custom_name or self.title


@dataclass(frozen=True)
class _Entry:
    type: str
    message: Any
    is_meta: bool
    timestamp: str
    git_branch: str


def _typed(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if type(value) is not kind:
        raise TypeError(key)
    return value


def _read_lines(path: str | os.PathLike[str], limit: int, *, strict: bool = False) -> Iterator[bytes]:
    """Yield the lines of a file without line endings.

    A line of ``limit`` bytes or more ends the iteration; with ``strict`` it
    raises ``ValueError`` instead.
    """
    with open(path, "rb") as handle:
        for raw in handle:
            if raw.endswith(b"\n"):
                raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            if len(raw) >= limit:
                if strict:
                    raise ValueError(f"line too long in {os.fspath(path)}")
                return
            yield raw


def _parse_entry(line: bytes) -> _Entry | None:
    try:
        data = json.loads(line.decode("utf-8", "replace"))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return _Entry(
            type=_typed(data, "type", str, ""),
            message=data.get("message"),
            is_meta=_typed(data, "isMeta", bool, False),
            timestamp=_typed(data, "timestamp", str, ""),
            git_branch=_typed(data, "gitBranch", str, ""),
        )
    except TypeError:
        return None


def _message_parts(message: Any) -> tuple[str, Any] | None:
    if not isinstance(message, dict):
        return None
    try:
        role = _typed(message, "role", str, "")
    except TypeError:
        return None
    return role, message.get("content")


def _parse_timestamp(value: str) -> datetime | None:
    match = _TIMESTAMP.match(value)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        if zone == "Z":
            tz = timezone.utc
        else:
            sign = -1 if zone[0] == "-" else 1
            offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
            tz = timezone(sign * offset)
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
        )
    except ValueError:
        return None


def extract_text(raw: Any) -> str:
    """Return the text of a message content: a string or a list of blocks."""
    if isinstance(raw, str):
        return raw.strip()
    if not isinstance(raw, list):
        return ""
    blocks = []
    for block in raw:
        if block is None:
            blocks.append(("", ""))
            continue
        if not isinstance(block, dict):
            return ""
        try:
            blocks.append((_typed(block, "type", str, ""), _typed(block, "text", str, "")))
        except TypeError:
            return ""
    for kind, text in blocks:
        if kind == "text" and text:
            return text.strip()
    return ""


def extract_tag_value(text: str, tag: str) -> str:
    """Return the stripped text between ``<tag>`` and ``</tag>``, or ``""``."""
    opening = f"<{tag}>"
    start = text.find(opening)
    if start == -1:
        return ""
    start += len(opening)
    end = text.find(f"</{tag}>", start)
    if end == -1:
        return ""
    return text[start:end].strip()


def parse_slash_command_title(text: str) -> str:
    """Turn slash-command markup into ``/name: args`` or ``/name``."""
    name = extract_tag_value(text, "command-name")
    if not name:
        return ""
    args = extract_tag_value(text, "command-args")
    return f"{name}: {args}" if args else name


def scan_session_quick(path: str | os.PathLike[str]) -> tuple[str, datetime | None, str]:
    """Read the first lines of a session for its title, date and branch."""
    title, date, branch = "", None, ""
    found_title = False
    try:
        for count, line in enumerate(_read_lines(path, _LINE_LIMIT), start=1):
            if (found_title and date is not None and branch) or count > _QUICK_SCAN_LINES:
                break
            entry = _parse_entry(line)
            if entry is None:
                continue
            if date is None and entry.timestamp:
                date = _parse_timestamp(entry.timestamp)
            if not branch and entry.git_branch:
                branch = entry.git_branch
            if found_title or entry.type != "user" or entry.is_meta or entry.message is None:
                continue
            parts = _message_parts(entry.message)
            if parts is None or parts[0] != "user":
                continue
            text = extract_text(parts[1])
            if not text:
                continue
            if text.startswith("<command-"):
                command_title = parse_slash_command_title(text)
                if command_title and command_title != "/clear":
                    title, found_title = command_title, True
            elif not text.startswith("<"):
                title, found_title = text, True
    except OSError:
        pass
    return title, date, branch


def count_conversation_messages(path: str | os.PathLike[str]) -> int:
    """Count the real user and assistant messages of a session file."""
    count = 0
    try:
        for line in _read_lines(path, _LINE_LIMIT):
            entry = _parse_entry(line)
            if entry is None or entry.type not in ("user", "assistant"):
                continue
            if entry.is_meta or entry.message is None:
                continue
            parts = _message_parts(entry.message)
            if parts is None:
                continue
            text = extract_text(parts[1])
            if text and (not text.startswith("<") or text.startswith("<command-")):
                count += 1
    except OSError:
        return count
    return count


def read_custom_title(path: str | os.PathLike[str]) -> str:
    """Return the last custom title recorded near the end of a session file."""
    try:
        with open(path, "rb") as handle:
            size = os.fstat(handle.fileno()).st_size
            handle.seek(max(0, size - _TAIL_SIZE))
            chunk = handle.read(_TAIL_SIZE)
    except OSError:
        return ""

    last_title = ""
    for line in chunk.decode("utf-8", "replace").split("\n"):
        line = line.strip()
        if not line or "custom-title" not in line:
            continue
        try:
            data = json.loads(line)
        except ValueError:
            continue
        if not isinstance(data, dict):
            continue
        try:
            kind = _typed(data, "type", str, "")
            custom = _typed(data, "customTitle", str, "")
        except TypeError:
            continue
        if kind == "custom-title":
            last_title = custom
    return last_title


def write_custom_title(file_path: str | os.PathLike[str], session_id: str, title: str) -> None:
    """Append a custom-title entry to an existing session file."""
    record = {"type": "custom-title", "customTitle": title, "sessionId": session_id}
    data = json.dumps(record, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    fd = os.open(file_path, os.O_WRONLY | os.O_APPEND)
    with os.fdopen(fd, "wb") as handle:
        handle.write(b"\n" + data + b"\n")


def load_sessions(encoded_project: str, last_session_id: str) -> list[Session]:
    """Load every session of a project, newest first."""
    project_dir = claude_dir() / "projects" / encoded_project
    with os.scandir(project_dir) as it:
        entries = sorted(it, key=lambda e: e.name)

    sessions = []
    for entry in entries:
        name = entry.name
        if entry.is_dir(follow_symlinks=False) or not name.endswith(".jsonl") or name.startswith("agent-"):
            continue
        session_id = name[: -len(".jsonl")]
        file_path = str(Path(project_dir) / name)
        try:
            info = entry.stat(follow_symlinks=False)
        except OSError:
            continue

        title, date, branch = scan_session_quick(file_path)
        if date is None:
            date = datetime.fromtimestamp(info.st_mtime).astimezone()
        if not title:
            title = session_id[:8] + "..."
        if len(title) > _TITLE_LIMIT:
            title = title[: _TITLE_LIMIT - 3] + "..."

        sessions.append(
            Session(
                id=session_id,
                project_path=encoded_project,
                file_path=file_path,
                date=date,
                title=title,
                custom_name=read_custom_title(file_path),
                is_pinned=session_id == last_session_id,
                git_branch=branch,
            )
        )

    sessions.sort(key=lambda s: s.date, reverse=True)
    return sessions