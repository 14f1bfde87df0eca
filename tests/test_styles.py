import re

from ccvault.styles import (
    MUTED_STYLE,
    PRIMARY_COLOR,
    ROUNDED_BORDER,
    SELECTED_ITEM_STYLE,
    Style,
    display_height,
    display_width,
    join_horizontal,
    join_vertical,
)

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text):
    return ANSI.sub("", text)


def test_plain_style_leaves_text_alone():
    assert Style().render("hello") == "hello"


def test_width_pads_short_text():
    out = Style(width=8).render("ab")
    assert display_width(out) == 8
    assert plain(out).startswith("ab")


def test_width_wraps_long_text_at_spaces():
    text = "one two three four five six"
    out = Style(width=10).render(text)
    lines = plain(out).split("\n")
    assert len(lines) > 1
    assert all(display_width(line) == 10 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_wrap_breaks_words_longer_than_width():
    word = "x" * 25
    out = Style(width=10).render(word)
    assert "".join(plain(out).split("\n")) == word
    assert display_height(out) == 3


def test_padding_surrounds_text():
    pad = 2
    out = Style(padding=(1, pad, 1, pad)).render("x")
    lines = out.split("\n")
    assert display_height(out) == 1 + 2
    assert display_width(out) == len("x") + 2 * pad
    assert lines[1].strip() == "x"


def test_height_adds_blank_lines():
    out = Style(height=4).render("a")
    assert display_height(out) == 4
    assert out.split("\n")[0] == "a"


def test_border_frames_the_block():
    out = Style(border=ROUNDED_BORDER).render("ab\ncd")
    lines = plain(out).split("\n")
    assert lines[0] == ROUNDED_BORDER.top_left + ROUNDED_BORDER.top * 2 + ROUNDED_BORDER.top_right
    assert lines[1] == ROUNDED_BORDER.left + "ab" + ROUNDED_BORDER.right
    assert lines[-1].startswith(ROUNDED_BORDER.bottom_left)
    assert display_height(out) == 2 + 2


def test_colour_is_added_without_changing_visible_text():
    out = Style(foreground=PRIMARY_COLOR, bold=True).render("hi")
    assert out.startswith("\x1b[")
    assert plain(out) == "hi"
    assert display_width(out) == len("hi")


def test_nested_styles_keep_outer_colour_after_inner_reset():
    inner = MUTED_STYLE.render("in")
    out = SELECTED_ITEM_STYLE.render(inner + "out")
    assert plain(out) == "inout"
    prefix = out[: out.index("\x1b[0m")] if False else None
    segments = out.split("\x1b[0m")
    assert segments[1] != "out"
    assert plain(segments[1]) == "out"
    assert prefix is None


def test_empty_text_renders_empty():
    assert Style(foreground=PRIMARY_COLOR).render("") == ""


def test_display_width_counts_wide_characters():
    assert display_width("日本") == 4


def test_display_width_ignores_escape_codes():
    assert display_width(MUTED_STYLE.render("abc")) == len("abc")


def test_join_horizontal_aligns_at_top():
    out = join_horizontal("a\nb", "ccc")
    lines = out.split("\n")
    assert display_height(out) == 2
    assert lines[0] == "a" + "ccc"
    assert lines[1] == "b" + " " * len("ccc")


def test_join_vertical_pads_to_widest_line():
    out = join_vertical("a", "bbb", "cc")
    lines = out.split("\n")
    assert [line.rstrip() for line in lines] == ["a", "bbb", "cc"]
    assert {len(line) for line in lines} == {len("bbb")}


def test_with_width_returns_a_new_style():
    base = Style(bold=True)
    wider = base.with_width(12).with_height(3)
    assert base.width is None and base.height is None
    assert (wider.width, wider.height, wider.bold) == (12, 3, True)


def test_margins_offset_the_block():
    out = Style(margin_left=3, margin_top=2).render("x")
    lines = out.split("\n")
    assert lines[2] == " " * 3 + "x"
    assert [line.strip() for line in lines[:2]] == ["", ""]