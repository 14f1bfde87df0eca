import re

import pytest

from ccvault.dialog import Dialog, DialogType, render_dialog, render_help_content
from ccvault.styles import display_height, display_width

_ANSI = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def plain(text):
    return _ANSI.sub("", text)


def test_no_dialog_renders_nothing():
    assert render_dialog(None, 80, 24) == ""


def test_none_kind_renders_nothing():
    assert render_dialog(Dialog(), 80, 24) == ""


@pytest.mark.parametrize(
    "kind, title",
    [
        (DialogType.CONFIRM_DELETE, "Delete Session"),
        (DialogType.CONFIRM_BULK_DELETE, "Bulk Delete"),
        (DialogType.CONFIRM_PRUNE, "Prune Empty Sessions"),
        (DialogType.RENAME, "Rename Session"),
        (DialogType.HELP, "Keyboard Shortcuts"),
    ],
)
def test_dialog_titles(kind, title):
    assert title in plain(render_dialog(Dialog(kind=kind), 80, 40))


def test_confirm_shows_message_and_keys():
    dialog = Dialog(kind=DialogType.CONFIRM_DELETE, message="Remove it?\nSecond line")
    text = plain(render_dialog(dialog, 80, 24))
    assert "Remove it?" in text
    assert "Second line" in text
    assert "y confirm" in text
    assert "n/esc cancel" in text


def test_rename_shows_input_with_cursor():
    dialog = Dialog(kind=DialogType.RENAME, input="my name")
    text = plain(render_dialog(dialog, 80, 24))
    assert "Enter new name:" in text
    assert "my name█" in text


def test_tiny_screen_has_no_margin():
    dialog = Dialog(kind=DialogType.CONFIRM_PRUNE, message="Prune?")
    text = plain(render_dialog(dialog, 1, 1))
    assert text.startswith("╔")


def test_dialog_is_centred():
    dialog = Dialog(kind=DialogType.CONFIRM_DELETE, message="Remove it?")
    box = render_dialog(dialog, 1, 1)
    box_width, box_height = display_width(box), display_height(box)
    screen_width, screen_height = 120, 40
    rows = plain(render_dialog(dialog, screen_width, screen_height)).split("\n")

    pad_top = next(i for i, row in enumerate(rows) if row.strip())
    pad_left = rows[pad_top].index("╔")
    assert 2 * pad_top <= screen_height - box_height <= 2 * pad_top + 1
    assert 2 * pad_left <= screen_width - box_width <= 2 * pad_left + 1
    assert len(rows) == pad_top + box_height


def test_help_content_lists_every_shortcut():
    content = render_help_content()
    lines = plain(content).split("\n")
    assert display_height(content) == 15
    assert all(line.startswith("  ") for line in lines)
    assert any("q/Ctrl+C" in line and "Quit" in line for line in lines)
    assert any("Resume selected session" in line for line in lines)


def test_help_dialog_contains_help_content():
    text = plain(render_dialog(Dialog(kind=DialogType.HELP), 100, 40))
    assert "Toggle select for bulk ops" in text
    assert "?/esc close help" in text