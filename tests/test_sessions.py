import json
from datetime import datetime, timezone

import pytest

from ccvault.sessions import (
    Session,
    count_conversation_messages,
    extract_tag_value,
    extract_text,
    load_sessions,
    parse_slash_command_title,
    read_custom_title,
    scan_session_quick,
    write_custom_title,
)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def write_jsonl(path, entries):
    path.write_text("\n".join(json.dumps(e) for e in entries) + "\n")
    return path


def user(text, **extra):
    entry = {"type": "user", "message": {"role": "user", "content": text}}
    entry.update(extra)
    return entry


def assistant(text):
    return {"type": "assistant", "message": {"role": "assistant", "content": [{"type": "text", "text": text}]}}


def test_extract_text_string_is_stripped():
    assert extract_text("  hello  ") == "hello"


def test_extract_text_first_text_block():
    blocks = [{"type": "tool_use"}, {"type": "text", "text": ""}, {"type": "text", "text": " first "}, {"type": "text", "text": "second"}]
    assert extract_text(blocks) == "first"


def test_extract_text_invalid_shapes():
    assert extract_text(None) == ""
    assert extract_text({"text": "x"}) == ""
    assert extract_text(["plain", {"type": "text", "text": "x"}]) == ""


def test_parse_slash_command_title():
    text = "<command-name>/feature-dev</command-name>\n<command-args>some args</command-args>"
    assert parse_slash_command_title(text) == "/feature-dev: some args"
    assert parse_slash_command_title("<command-name>/clear</command-name>") == "/clear"
    assert parse_slash_command_title("<command-args>x</command-args>") == ""


def test_extract_tag_value_needs_closing_tag():
    assert extract_tag_value("<a> value </a>", "a") == "value"
    assert extract_tag_value("<a>open", "a") == ""


def test_scan_session_quick(tmp_path):
    path = write_jsonl(
        tmp_path / "s.jsonl",
        [
            {"type": "summary"},
            user("meta text", isMeta=True, timestamp="2024-01-02T03:04:05Z", gitBranch="main"),
            user("<command-name>/clear</command-name>"),
            user("<system>ignored"),
            user("Fix the bug"),
        ],
    )
    title, date, branch = scan_session_quick(path)
    assert title == "Fix the bug"
    assert date == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert branch == "main"


def test_scan_session_quick_slash_command_title(tmp_path):
    path = write_jsonl(tmp_path / "s.jsonl", [user("<command-name>/review</command-name><command-args>pr</command-args>")])
    assert scan_session_quick(path)[0] == "/review: pr"


def test_scan_session_quick_nanosecond_timestamp(tmp_path):
    path = write_jsonl(tmp_path / "s.jsonl", [{"type": "x", "timestamp": "2024-01-02T03:04:05.123456789Z"}])
    assert scan_session_quick(path)[1].microsecond == 123456


def test_scan_session_quick_stops_after_thirty_lines(tmp_path):
    entries = [{"type": "noise"}] * 30 + [user("late title")]
    path = write_jsonl(tmp_path / "s.jsonl", entries)
    assert scan_session_quick(path) == ("", None, "")


def test_scan_missing_file():
    assert scan_session_quick("/nonexistent/file.jsonl") == ("", None, "")


def test_count_conversation_messages(tmp_path):
    path = write_jsonl(
        tmp_path / "s.jsonl",
        [user("hi"), assistant("hello"), user("<system>"), user("<command-name>/x</command-name>"), user("m", isMeta=True), {"type": "summary"}],
    )
    path.write_text(path.read_text() + "not json\n")
    assert count_conversation_messages(path) == 3
    assert count_conversation_messages(tmp_path / "missing.jsonl") == 0


def test_custom_title_round_trip(tmp_path):
    path = write_jsonl(tmp_path / "s.jsonl", [user("hi")])
    write_custom_title(path, "abc", "First")
    write_custom_title(path, "abc", "Second")
    assert read_custom_title(path) == "Second"
    last = [line for line in path.read_text().splitlines() if line][-1]
    assert json.loads(last) == {"type": "custom-title", "customTitle": "Second", "sessionId": "abc"}


def test_write_custom_title_requires_existing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_custom_title(tmp_path / "missing.jsonl", "abc", "t")


def test_display_name_prefers_custom_name():
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert Session("a", "p", "f", when, title="T").display_name() == "T"
    assert Session("a", "p", "f", when, title="T", custom_name="C").display_name() == "C"


def test_load_sessions(home):
    project = home / ".claude" / "projects" / "-work-app"
    project.mkdir(parents=True)
    write_jsonl(project / "older-session.jsonl", [user("old", timestamp="2024-01-01T00:00:00Z")])
    write_jsonl(project / "newer-session.jsonl", [user("x" * 70, timestamp="2024-02-01T00:00:00Z")])
    write_jsonl(project / "untitled-session.jsonl", [{"type": "x", "timestamp": "2023-01-01T00:00:00Z"}])
    write_jsonl(project / "agent-older-session.jsonl", [user("agent")])
    (project / "notes.txt").write_text("ignored")
    write_custom_title(project / "older-session.jsonl", "older-session", "Renamed")

    sessions = load_sessions("-work-app", "older-session")
    assert [s.id for s in sessions] == ["newer-session", "older-session", "untitled-session"]
    newer, older, untitled = sessions
    assert newer.title == "x" * 57 + "..."
    assert older.custom_name == "Renamed"
    assert older.is_pinned and not newer.is_pinned
    assert untitled.title == "untitled..."
    assert all(s.conversation_count == -1 and s.project_path == "-work-app" for s in sessions)


def test_load_sessions_missing_project(home):
    with pytest.raises(FileNotFoundError):
        load_sessions("-nope", "")