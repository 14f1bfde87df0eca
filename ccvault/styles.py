"""Terminal text styling, layout helpers and the colour scheme."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from itertools import zip_longest
from typing import Iterator

from wcwidth import wcswidth, wcwidth

_ANSI = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_RESET = "\x1b[0m"
_RESETS = (_RESET, "\x1b[m")


def _strip_ansi(text: str) -> str:
    return _ANSI.sub("", text)


def _char_width(ch: str) -> int:
    return max(wcwidth(ch), 0)


def _line_width(line: str) -> int:
    plain = _strip_ansi(line)
    width = wcswidth(plain)
    if width < 0:
        width = sum(_char_width(ch) for ch in plain)
    return width


def display_width(text: str) -> int:
    """Return the cell width of the widest line of ``text``."""
    return max(_line_width(line) for line in text.split("\n"))


def display_height(text: str) -> int:
    """Return the number of lines of ``text``."""
    return text.count("\n") + 1


def _pad_right(line: str, width: int) -> str:
    return line + " " * max(0, width - _line_width(line))


def _tokens(line: str) -> Iterator[tuple[str, int]]:
    """Yield escape sequences (width 0) and visible characters with their widths."""
    pos = 0
    for match in _ANSI.finditer(line):
        for ch in line[pos:match.start()]:
            yield ch, _char_width(ch)
        yield match.group(), 0
        pos = match.end()
    for ch in line[pos:]:
        yield ch, _char_width(ch)


def _sgr_state(state: str, tokens: list[tuple[str, int]]) -> str:
    for token, _ in tokens:
        if token.startswith("\x1b"):
            state = "" if token in _RESETS else state + token
    return state


def _wrap_line(line: str, width: int) -> list[str]:
    """Wrap a line at spaces, breaking words only when they do not fit."""
    if width <= 0 or _line_width(line) <= width:
        return [line]
    out: list[str] = []
    carry = ""
    current: list[tuple[str, int]] = []
    current_width = 0
    for token, w in _tokens(line):
        while current_width > 0 and current_width + w > width:
            spaces = [i for i, (t, _) in enumerate(current) if t == " "]
            if spaces and spaces[-1] > 0:
                head, tail = current[: spaces[-1]], current[spaces[-1] + 1:]
            else:
                head, tail = current, []
            state = _sgr_state(carry, head)
            out.append(carry + "".join(t for t, _ in head) + (_RESET if state else ""))
            carry = state
            current = tail
            current_width = sum(tw for _, tw in tail)
        current.append((token, w))
        current_width += w
    out.append(carry + "".join(t for t, _ in current))
    return out


def _sgr_color(hex_color: str, layer: int) -> str:
    value = hex_color.lstrip("#")
    red, green, blue = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return f"\x1b[{layer};2;{red};{green};{blue}m"


@dataclass(frozen=True)
class _Border:
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


ROUNDED_BORDER = _Border("─", "─", "│", "│", "╭", "╮", "╰", "╯")
DOUBLE_BORDER = _Border("═", "═", "║", "║", "╔", "╗", "╚", "╝")


@dataclass(frozen=True)
class Style:
    """How a block of text is coloured, padded, sized and framed.

    ``width`` and ``height`` include the padding but not the border.
    ``padding`` is (top, right, bottom, left).
    """

    foreground: str | None = None
    background: str | None = None
    bold: bool = False
    border: _Border | None = None
    border_foreground: str | None = None
    padding: tuple[int, int, int, int] = (0, 0, 0, 0)
    margin_left: int = 0
    margin_top: int = 0
    width: int | None = None
    height: int | None = None

    def with_width(self, width: int) -> Style:
        """Return a copy of this style with the given width."""
        return replace(self, width=width)

    def with_height(self, height: int) -> Style:
        """Return a copy of this style with the given height."""
        return replace(self, height=height)

    def _prefix(self) -> str:
        codes = []
        if self.bold:
            codes.append("\x1b[1m")
        if self.foreground:
            codes.append(_sgr_color(self.foreground, 38))
        if self.background:
            codes.append(_sgr_color(self.background, 48))
        return "".join(codes)

    def _paint(self, line: str) -> str:
        prefix = self._prefix()
        if not prefix or not line:
            return line
        for reset in _RESETS:
            line = line.replace(reset, _RESET + prefix)
        return prefix + line + _RESET

    def _frame(self, lines: list[str]) -> list[str]:
        border = self.border
        assert border is not None
        colour = Style(foreground=self.border_foreground)
        inner = max(_line_width(line) for line in lines)
        left, right = colour._paint(border.left), colour._paint(border.right)
        top = colour._paint(border.top_left + border.top * inner + border.top_right)
        bottom = colour._paint(border.bottom_left + border.bottom * inner + border.bottom_right)
        return [top, *(left + _pad_right(line, inner) + right for line in lines), bottom]

    def render(self, text: str) -> str:
        """Apply the style to ``text`` and return the styled block."""
        top, right, bottom, left = self.padding
        lines = text.replace("\r\n", "\n").replace("\t", "    ").split("\n")
        if self.width is not None:
            inner = self.width - left - right
            if inner > 0:
                lines = [piece for line in lines for piece in _wrap_line(line, inner)]

        content_width = max(_line_width(line) for line in lines)
        if self.width is not None:
            content_width = max(content_width, self.width - left - right)
        blank = " " * (content_width + left + right)
        body = [" " * left + _pad_right(line, content_width) + " " * right for line in lines]
        body = [blank] * top + body + [blank] * bottom
        if self.height is not None and len(body) < self.height:
            body += [blank] * (self.height - len(body))

        body = [self._paint(line) for line in body]
        if self.border is not None:
            body = self._frame(body)
        if self.margin_left:
            body = [" " * self.margin_left + line for line in body]
        if self.margin_top:
            block_width = max(_line_width(line) for line in body)
            body = [" " * block_width] * self.margin_top + body
        return "\n".join(body)


def join_horizontal(*blocks: str) -> str:
    """Place blocks side by side, aligned at the top."""
    if not blocks:
        return ""
    widths = [display_width(block) for block in blocks]
    rows = zip_longest(*(block.split("\n") for block in blocks))
    return "\n".join(
        "".join(" " * w if part is None else _pad_right(part, w) for part, w in zip(row, widths))
        for row in rows
    )


def join_vertical(*blocks: str) -> str:
    """Stack blocks, padding every line to the widest one."""
    if not blocks:
        return ""
    lines = [line for block in blocks for line in block.split("\n")]
    width = max(_line_width(line) for line in lines)
    return "\n".join(_pad_right(line, width) for line in lines)


PRIMARY_COLOR = "#7C3AED"
SECONDARY_COLOR = "#06B6D4"
ACCENT_COLOR = "#F59E0B"
MUTED_COLOR = "#6B7280"
TEXT_COLOR = "#E5E7EB"
BG_COLOR = "#1F2937"
SELECTED_BG = "#374151"
ERROR_COLOR = "#EF4444"
SUCCESS_COLOR = "#10B981"
PINNED_COLOR = "#F59E0B"

ACTIVE_PANEL_STYLE = Style(border=ROUNDED_BORDER, border_foreground=PRIMARY_COLOR, padding=(0, 1, 0, 1))
INACTIVE_PANEL_STYLE = Style(border=ROUNDED_BORDER, border_foreground=MUTED_COLOR, padding=(0, 1, 0, 1))

ACTIVE_TITLE_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
INACTIVE_TITLE_STYLE = Style(foreground=MUTED_COLOR, bold=True)

SELECTED_ITEM_STYLE = Style(foreground=TEXT_COLOR, background=SELECTED_BG, bold=True)
NORMAL_ITEM_STYLE = Style(foreground=TEXT_COLOR)
MUTED_STYLE = Style(foreground=MUTED_COLOR)
PINNED_STYLE = Style(foreground=PINNED_COLOR, bold=True)

STATUS_BAR_STYLE = Style(foreground=TEXT_COLOR, background="#111827", padding=(0, 1, 0, 1))
HELP_KEY_STYLE = Style(foreground=SECONDARY_COLOR, bold=True)
HELP_DESC_STYLE = Style(foreground=MUTED_COLOR)

DIALOG_STYLE = Style(
    border=DOUBLE_BORDER, border_foreground=PRIMARY_COLOR, padding=(1, 2, 1, 2), width=50
)
DIALOG_TITLE_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)

USER_MSG_STYLE = Style(foreground=SECONDARY_COLOR)
ASSISTANT_MSG_STYLE = Style(foreground=SUCCESS_COLOR)
USER_LABEL_STYLE = Style(foreground="#EC4899", bold=True)
ASSISTANT_LABEL_STYLE = Style(foreground=SUCCESS_COLOR, bold=True)
STAT_STYLE = Style(foreground=ACCENT_COLOR, bold=True)

SEARCH_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)