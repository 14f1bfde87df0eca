import re

import pytest

from ccvault.markdown import render_markdown_lines, word_wrap

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(lines):
    return [ANSI.sub("", line) for line in lines]


@pytest.mark.parametrize("marker", ["# ", "## ", "### "])
def test_headers_lose_their_marker(marker):
    assert plain(render_markdown_lines(marker + "Title", 40)) == ["Title"]


def test_code_block_is_kept_verbatim():
    source = "```py\n# not a header\n- not a bullet\n```"
    assert plain(render_markdown_lines(source, 40)) == source.split("\n")


def test_blank_lines_are_kept():
    assert render_markdown_lines("a\n\nb", 40) == ["a", "", "b"]


def test_bullets_wrap_with_hanging_indent():
    text = "- " + " ".join(["word"] * 12)
    lines = plain(render_markdown_lines(text, 20))
    assert lines[0].startswith("- ")
    assert all(line.startswith("  ") for line in lines[1:])
    assert all(len(line) <= 20 for line in lines)
    assert " ".join(line[2:] for line in lines).split() == text[2:].split()


def test_numbered_list_continuation_is_aligned():
    text = "12. " + " ".join(["item"] * 10)
    lines = render_markdown_lines(text, 20)
    assert lines[0].startswith("12. ")
    assert all(line.startswith(" " * len("12. ")) for line in lines[1:])
    assert all(len(line) <= 20 for line in lines)


def test_horizontal_rule_fills_width():
    for rule in ("---", "***", "___"):
        assert plain(render_markdown_lines(rule, 20)) == ["─" * 20]


def test_width_has_a_minimum():
    lines = render_markdown_lines("word " * 10, 3)
    assert len(lines) > 1
    assert all(len(line) <= 10 for line in lines)


def test_plain_text_wraps():
    text = "the quick brown fox jumps over the lazy dog"
    lines = render_markdown_lines(text, 12)
    assert all(len(line) <= 12 for line in lines)
    assert " ".join(lines) == text


def test_word_wrap_short_text_is_unchanged():
    assert word_wrap("short", 10) == ["short"]
    assert word_wrap("anything goes here", 0) == ["anything goes here"]


def test_word_wrap_only_spaces():
    assert word_wrap(" " * 8, 2) == [""]


def test_word_wrap_keeps_long_words_whole():
    long_word = "x" * 15
    assert word_wrap(f"a {long_word} b", 5) == ["a", long_word, "b"]


def test_word_wrap_respects_width():
    text = " ".join(f"w{i}" for i in range(30))
    lines = word_wrap(text, 16)
    assert all(len(line) <= 16 for line in lines)
    assert " ".join(lines) == text