"""Rendering of the project and session list panels."""

from __future__ import annotations

from .projects import Project
from .sessions import Session
from .styles import (
    ACTIVE_PANEL_STYLE,
    ACTIVE_TITLE_STYLE,
    INACTIVE_PANEL_STYLE,
    INACTIVE_TITLE_STYLE,
    MUTED_STYLE,
    NORMAL_ITEM_STYLE,
    PINNED_STYLE,
    SEARCH_STYLE,
    SELECTED_ITEM_STYLE,
    join_vertical,
)


def _visible_range(selected: int, count: int, content_height: int) -> range:
    offset = selected - content_height + 1 if selected >= content_height else 0
    return range(offset, min(count, offset + content_height))


def _frame(title: str, lines: list[str], active: bool, width: int, height: int) -> str:
    content_height = height - 4
    lines = lines + [""] * max(0, content_height - len(lines))
    panel = ACTIVE_PANEL_STYLE if active else INACTIVE_PANEL_STYLE
    return panel.with_width(width).with_height(height).render(
        join_vertical(title, "─" * (width - 4), join_vertical(*lines))
    )


def render_projects_panel(
    projects: list[Project], selected: int, active: bool, width: int, height: int
) -> str:
    """Render the list of projects."""
    title_style = ACTIVE_TITLE_STYLE if active else INACTIVE_TITLE_STYLE
    title = title_style.render(f" Projects ({len(projects)}) ")

    lines = []
    max_len = width - 6
    for i in _visible_range(selected, len(projects), height - 4):
        display = projects[i].display_path
        if max_len > 0 and len(display) > max_len:
            display = "..." + display[len(display) - max_len + 3:]
        if i == selected:
            lines.append(SELECTED_ITEM_STYLE.with_width(width - 4).render("▸ " + display))
        else:
            lines.append(NORMAL_ITEM_STYLE.render("  " + display))

    return _frame(title, lines, active, width, height)


def _sessions_title(count: int, active: bool, width: int, search_active: bool, query: str) -> str:
    title_style = ACTIVE_TITLE_STYLE if active else INACTIVE_TITLE_STYLE
    if not search_active:
        return title_style.render(f" Sessions ({count}) ")
    max_query_len = width - 22
    if max_query_len > 0 and len(query) > max_query_len:
        query = query[: max(max_query_len - 3, 0)] + "..."
    return (
        title_style.render(" Search: ")
        + SEARCH_STYLE.render(f'"{query}"')
        + title_style.render(f" ({count} results) ")
    )


def _session_line(session: Session, is_selected: bool, width: int) -> str:
    cursor = "▸ " if is_selected else "  "
    select_mark = "●" if session.selected else " "
    pin = "📌" if session.is_pinned else " "
    name = session.display_name()
    max_name_len = width - 16
    if max_name_len > 0 and len(name) > max_name_len:
        name = name[: max(max_name_len - 3, 0)] + "..."
    line = f"{cursor}{select_mark}{pin} {session.date.strftime('%d/%m')} {name}"
    if is_selected:
        return SELECTED_ITEM_STYLE.with_width(width - 4).render(line)
    if session.is_pinned:
        return PINNED_STYLE.render(line)
    return NORMAL_ITEM_STYLE.render(line)


def render_sessions_panel(
    sessions: list[Session],
    selected: int,
    active: bool,
    width: int,
    height: int,
    search_active: bool,
    search_query: str,
) -> str:
    """Render the list of sessions, or of search results."""
    title = _sessions_title(len(sessions), active, width, search_active, search_query)
    if not sessions:
        lines = [MUTED_STYLE.render("  No sessions found")]
    else:
        lines = [
            _session_line(sessions[i], i == selected, width)
            for i in _visible_range(selected, len(sessions), height - 4)
        ]
    return _frame(title, lines, active, width, height)