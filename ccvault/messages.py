"""Conversation preview and Markdown export of a session."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .sessions import Session, _message_parts, _parse_entry, _read_lines, extract_text

_PREVIEW_LINE_LIMIT = 2 * 1024 * 1024


@dataclass
class Message:
    """A user or assistant message with its text."""

    role: str
    content: str


@dataclass
class PreviewData:
    """The conversation of a session as shown in the preview panel."""

    messages: list[Message] = field(default_factory=list)
    total_messages: int = 0
    git_branch: str = ""


def load_preview(file_path: str | os.PathLike[str]) -> PreviewData:
    """Read the conversation of a session file.

    Raises ``OSError`` if the file cannot be read and ``ValueError`` if a
    line is too long to scan.
    """
    messages: list[Message] = []
    branch = ""
    for line in _read_lines(file_path, _PREVIEW_LINE_LIMIT, strict=True):
        entry = _parse_entry(line)
        if entry is None:
            continue
        if not branch and entry.git_branch:
            branch = entry.git_branch
        if entry.type not in ("user", "assistant") or entry.is_meta or entry.message is None:
            continue
        parts = _message_parts(entry.message)
        if parts is None:
            continue
        role, content = parts
        text = extract_text(content)
        if not text or text.startswith("<"):
            continue
        messages.append(Message(role=role, content=text))
    return PreviewData(messages=messages, total_messages=len(messages), git_branch=branch)


def export_session(session: Session, project_display: str) -> str:
    """Render a session as a Markdown document."""
    preview = load_preview(session.file_path)

    parts = [
        f"# Session: {session.display_name()}\n",
        f"**Date:** {session.date.strftime('%Y-%m-%d')}  **Project:** {project_display}",
    ]
    if preview.git_branch:
        parts.append(f"  **Branch:** {preview.git_branch}")
    parts.append("\n\n---\n\n")

    for message in preview.messages:
        role = "Assistant" if message.role == "assistant" else "User"
        parts.append(f"**{role}:** {message.content}\n\n")
    return "".join(parts)