"""Modal dialogs drawn over the main view."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .styles import (
    DIALOG_STYLE,
    DIALOG_TITLE_STYLE,
    HELP_DESC_STYLE,
    HELP_KEY_STYLE,
    SEARCH_STYLE,
    Style,
    display_height,
    display_width,
    join_vertical,
)


class DialogType(IntEnum):
    """The kinds of dialog."""

    NONE = 0
    CONFIRM_DELETE = 1
    CONFIRM_BULK_DELETE = 2
    CONFIRM_PRUNE = 3
    RENAME = 4
    HELP = 5


@dataclass
class Dialog:
    """State of the open dialog."""

    kind: DialogType = DialogType.NONE
    message: str = ""
    input: str = ""
    cursor_pos: int = 0
    session_ids: list[str] = field(default_factory=list)


_HELP_KEYS = (
    ("↑/↓ or j/k", "Navigate within panel"),
    ("←/→ or h/l", "Switch panels"),
    ("Tab", "Cycle panels"),
    ("Enter", "Resume selected session"),
    ("r", "Rename session"),
    ("d", "Delete session"),
    ("x", "Export session to markdown"),
    ("c", "Copy resume command"),
    ("Space", "Toggle select for bulk ops"),
    ("D", "Bulk delete selected"),
    ("X", "Bulk export selected"),
    ("P", "Prune empty sessions"),
    ("/", "Search sessions"),
    ("?", "Toggle this help"),
    ("q/Ctrl+C", "Quit"),
)

_CONFIRM_TITLES = {
    DialogType.CONFIRM_DELETE: "Delete Session",
    DialogType.CONFIRM_BULK_DELETE: "Bulk Delete",
    DialogType.CONFIRM_PRUNE: "Prune Empty Sessions",
}


def render_help_content() -> str:
    """Render the table of keyboard shortcuts."""
    key_style = HELP_KEY_STYLE.with_width(16)
    return join_vertical(
        *(f"  {key_style.render(key)}  {HELP_DESC_STYLE.render(desc)}" for key, desc in _HELP_KEYS)
    )


def _content(dialog: Dialog) -> str:
    if dialog.kind in _CONFIRM_TITLES:
        return join_vertical(
            DIALOG_TITLE_STYLE.render(_CONFIRM_TITLES[dialog.kind]),
            "",
            dialog.message,
            "",
            HELP_KEY_STYLE.render("y") + " confirm  " + HELP_KEY_STYLE.render("n/esc") + " cancel",
        )
    if dialog.kind == DialogType.RENAME:
        return join_vertical(
            DIALOG_TITLE_STYLE.render("Rename Session"),
            "",
            "Enter new name:",
            SEARCH_STYLE.render(dialog.input + "█"),
            "",
            HELP_KEY_STYLE.render("enter") + " save  " + HELP_KEY_STYLE.render("esc") + " cancel",
        )
    return join_vertical(
        DIALOG_TITLE_STYLE.render("Keyboard Shortcuts"),
        "",
        render_help_content(),
        "",
        HELP_KEY_STYLE.render("?/esc") + " close help",
    )


def render_dialog(dialog: Dialog | None, screen_width: int, screen_height: int) -> str:
    """Render a dialog centred on the screen, or ``""`` when there is none."""
    if dialog is None or dialog.kind == DialogType.NONE:
        return ""
    box = DIALOG_STYLE.render(_content(dialog))
    pad_left = max((screen_width - display_width(box)) // 2, 0)
    pad_top = max((screen_height - display_height(box)) // 2, 0)
    return Style(margin_left=pad_left, margin_top=pad_top).render(box)