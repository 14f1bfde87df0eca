"""Rendering of the conversation preview panel."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import ProjectConfig
from .markdown import render_markdown_lines
from .messages import Message, PreviewData
from .sessions import Session
from .styles import (
    ACTIVE_PANEL_STYLE,
    ACTIVE_TITLE_STYLE,
    ASSISTANT_LABEL_STYLE,
    INACTIVE_PANEL_STYLE,
    INACTIVE_TITLE_STYLE,
    MUTED_STYLE,
    STAT_STYLE,
    USER_LABEL_STYLE,
    display_width,
    join_vertical,
)

_MIN_WIDTH = 10
_MIN_BUDGET = 3


@dataclass
class MessageBlock:
    """The rendered lines of one message."""

    lines: list[str]
    role: str


@dataclass
class PreviewCache:
    """Pre-rendered preview of a session."""

    all_lines: list[str] = field(default_factory=list)
    blocks: list[MessageBlock] = field(default_factory=list)
    stats_lines: list[str] = field(default_factory=list)
    total_msgs: int = 0


def _render_message(message: Message, render_width: int) -> MessageBlock:
    if message.role == "assistant":
        label = ASSISTANT_LABEL_STYLE.render("Agent")
    else:
        label = USER_LABEL_STYLE.render("User")
    lines = [label + " " + MUTED_STYLE.render("───")]
    lines.extend("   " + line for line in render_markdown_lines(message.content, render_width))
    lines.append("")
    return MessageBlock(lines=lines, role=message.role)


def _stats(preview: PreviewData, session: Session, config: ProjectConfig | None) -> list[str]:
    stats = []
    if session.git_branch:
        stats.append(f"🌿 {session.git_branch}")
    stats.append(f"💬 {preview.total_messages} msgs")

    if config is not None and session.is_pinned:
        if config.last_cost > 0:
            stats.append(f"💰${config.last_cost:.2f}")
        total_tokens = config.last_input_tokens + config.last_output_tokens
        if total_tokens > 0:
            if total_tokens > 1000:
                stats.append(f"🔤{total_tokens // 1000}k")
            else:
                stats.append(f"🔤{total_tokens}")
        if config.last_duration > 0:
            minutes = config.last_duration / 60000
            if minutes >= 1:
                stats.append(f"⏱ {minutes:.0f}m")
            else:
                stats.append(f"⏱ {config.last_duration / 1000:.0f}s")
    return stats


def build_preview_cache(
    preview: PreviewData | None,
    session: Session | None,
    project_config: ProjectConfig | None,
    content_width: int,
) -> PreviewCache:
    """Render every message of a preview into styled lines."""
    if preview is None or session is None:
        return PreviewCache(all_lines=[MUTED_STYLE.render("  Select a session to preview")])

    content_width = max(content_width, _MIN_WIDTH)
    render_width = max(content_width - 4, _MIN_WIDTH)

    blocks = [_render_message(message, render_width) for message in preview.messages]

    stats_lines = ["─" * content_width]
    stats = _stats(preview, session, project_config)
    if stats:
        stats_lines.append(STAT_STYLE.render("  ".join(stats)))

    all_lines = [line for block in blocks for line in block.lines]
    all_lines.extend(stats_lines)
    return PreviewCache(
        all_lines=all_lines,
        blocks=blocks,
        stats_lines=stats_lines,
        total_msgs=len(blocks),
    )


def _pair(blocks: list[MessageBlock], index: int) -> list[MessageBlock]:
    pair = [blocks[index]]
    if index + 1 < len(blocks) and blocks[index + 1].role == "assistant":
        pair.append(blocks[index + 1])
    return pair


def _budgets(sizes: list[int], available: int) -> list[int]:
    """Share ``available`` lines between blocks; short blocks keep their size."""
    if sum(sizes) <= available:
        return list(sizes)

    budgets = [0] * len(sizes)
    assigned = [False] * len(sizes)
    remaining = available
    left = len(sizes)

    for _ in sizes:
        if left == 0:
            break
        fair_share = max(remaining // left, _MIN_BUDGET)
        changed = False
        for i, size in enumerate(sizes):
            if not assigned[i] and size <= fair_share:
                budgets[i] = size
                remaining -= size
                left -= 1
                assigned[i] = True
                changed = True
        if not changed:
            break

    for i, done in enumerate(assigned):
        if not done:
            share = max(remaining // left, _MIN_BUDGET)
            budgets[i] = share
            remaining -= share
            left -= 1
    return budgets


def truncate_block(lines: list[str], max_lines: int) -> list[str]:
    """Cut a block to ``max_lines`` lines, ending with an ellipsis if cut."""
    if len(lines) <= max_lines:
        return list(lines)
    return lines[: max(max_lines - 1, 0)] + [MUTED_STYLE.render("   ...")]


def build_summary_lines(cache: PreviewCache | None, panel_height: int) -> list[str]:
    """Show the first and last exchanges of a conversation within a panel height."""
    if cache is None:
        return []
    blocks = cache.blocks
    stats_lines = cache.stats_lines
    if not blocks:
        return list(stats_lines)

    user_indexes = [i for i, block in enumerate(blocks) if block.role == "user"]
    first_pair = _pair(blocks, user_indexes[0]) if user_indexes else []
    last_pair = _pair(blocks, user_indexes[-1]) if user_indexes else []

    summary = list(first_pair)
    if user_indexes and user_indexes[-1] > user_indexes[0] and last_pair:
        summary.extend(last_pair)

    has_separator = len(blocks) > len(summary)
    overhead = len(stats_lines) + (2 if has_separator else 0)
    available = panel_height - 4 - overhead
    budgets = _budgets([len(block.lines) for block in summary], available)

    first_len = len(first_pair)
    result: list[str] = []
    for block, budget in zip(summary[:first_len], budgets[:first_len]):
        result.extend(truncate_block(block.lines, budget))

    if has_separator:
        hidden = len(blocks) - len(summary)
        result.append(MUTED_STYLE.render(f"  ··· {hidden} more messages ···"))
        result.append("")

    for block, budget in zip(summary[first_len:], budgets[first_len:]):
        result.extend(truncate_block(block.lines, budget))

    result.extend(stats_lines)
    return result


def render_preview_panel(
    cached_lines: list[str],
    active: bool,
    width: int,
    height: int,
    scroll: int,
    branch: str,
    msg_count: int,
) -> tuple[str, int]:
    """Frame the visible part of the preview lines; return it and the line count."""
    title_style = ACTIVE_TITLE_STYLE if active else INACTIVE_TITLE_STYLE
    title = title_style.render(" Preview ")

    content_height = height - 4
    total_lines = len(cached_lines)

    max_scroll = max(total_lines - content_height, 0)
    scroll = max(min(scroll, max_scroll), 0)

    end = min(scroll + content_height, total_lines)
    visible = list(cached_lines[scroll:end]) if scroll < total_lines else []
    visible.extend([""] * max(0, content_height - len(visible)))

    right_parts = []
    if branch:
        right_parts.append(MUTED_STYLE.render(branch))
    if msg_count > 0:
        right_parts.append(MUTED_STYLE.render(f"{msg_count} msgs"))
    if active and max_scroll > 0:
        right_parts.append(MUTED_STYLE.render(f"{scroll * 100 // max_scroll}%"))
    if right_parts:
        right_info = " | ".join(right_parts)
        gap = max(width - display_width(title) - display_width(right_info) - 6, 1)
        title += " " * gap + right_info

    content = join_vertical(*visible)
    panel = ACTIVE_PANEL_STYLE if active else INACTIVE_PANEL_STYLE
    rendered = panel.with_width(width).with_height(height).render(
        join_vertical(title, "─" * (width - 4), content)
    )
    return rendered, total_lines