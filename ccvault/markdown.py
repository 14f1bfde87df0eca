"""Lightweight Markdown rendering for the preview panel."""

from __future__ import annotations

from .styles import ACCENT_COLOR, MUTED_COLOR, SECONDARY_COLOR, Style

MD_HEADER_STYLE = Style(foreground=SECONDARY_COLOR, bold=True)
MD_CODE_LINE_STYLE = Style(foreground="#A78BFA")
MD_CODE_FENCE_STYLE = Style(foreground=MUTED_COLOR)
MD_BULLET_STYLE = Style(foreground=ACCENT_COLOR)

_HEADER_PREFIXES = ("### ", "## ", "# ")
_RULES = ("---", "***", "___")


def word_wrap(text: str, width: int) -> list[str]:
    """Split ``text`` into lines of at most ``width`` characters at spaces."""
    if width <= 0 or len(text) <= width:
        return [text]
    words = text.split()
    if not words:
        return [""]
    lines = []
    current = words[0]
    for word in words[1:]:
        if len(current) + 1 + len(word) <= width:
            current += " " + word
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _hanging(first_prefix: str, indent: str, lines: list[str]) -> list[str]:
    return [(first_prefix if i == 0 else indent) + line for i, line in enumerate(lines)]


def _numbered_prefix(trimmed: str) -> str:
    if len(trimmed) > 2 and "0" <= trimmed[0] <= "9":
        dot = trimmed.find(". ")
        if 0 < dot <= 3:
            return trimmed[: dot + 2]
    return ""


def render_markdown_lines(content: str, width: int) -> list[str]:
    """Render headers, code blocks, lists and rules, wrapping text to ``width``."""
    width = max(width, 10)
    out: list[str] = []
    in_code_block = False

    for line in content.split("\n"):
        trimmed = line.strip()

        if trimmed.startswith("```"):
            in_code_block = not in_code_block
            out.append(MD_CODE_FENCE_STYLE.render(trimmed))
            continue
        if in_code_block:
            out.append(MD_CODE_LINE_STYLE.render(line))
            continue
        if not trimmed:
            out.append("")
            continue

        header = next((p for p in _HEADER_PREFIXES if trimmed.startswith(p)), None)
        if header is not None:
            out.append(MD_HEADER_STYLE.render(trimmed[len(header):]))
            continue

        if trimmed.startswith(("- ", "* ")):
            bullet = MD_BULLET_STYLE.render(trimmed[0]) + " "
            out.extend(_hanging(bullet, "  ", word_wrap(trimmed[2:], width - 2)))
            continue

        prefix = _numbered_prefix(trimmed)
        if prefix:
            rest = word_wrap(trimmed[len(prefix):], width - len(prefix))
            out.extend(_hanging(prefix, " " * len(prefix), rest))
            continue

        if trimmed in _RULES:
            out.append(MD_CODE_FENCE_STYLE.render("─" * width))
            continue

        out.extend(word_wrap(trimmed, width))

    return out