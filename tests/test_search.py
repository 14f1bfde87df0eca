import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ccvault.search import (
    SearchResult,
    delete_session_files,
    extract_search_text,
    search_in_file,
    search_sessions,
)
from ccvault.sessions import Session

LINES = [
    {"type": "user", "message": {"role": "user", "content": "Hello World"}},
    {
        "type": "assistant",
        "message": {
            "role": "assistant",
            "content": [
                {"type": "text", "text": "hello again"},
                {"type": "tool_use", "text": "zzz only in a tool"},
            ],
        },
    },
    {"type": "user", "isMeta": True, "message": {"role": "user", "content": "hello meta"}},
    {"type": "summary", "summary": "hello summary"},
    {"type": "user", "message": None, "text": "hello"},
]


def _write(path: Path, records, extra=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    body = "\n".join(json.dumps(r) for r in records) + "\n" + extra
    path.write_text(body, encoding="utf-8")
    return path


def _session(path: Path, session_id="sid") -> Session:
    return Session(
        id=session_id,
        project_path="-proj",
        file_path=str(path),
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_search_in_file_counts_conversation_messages(tmp_path):
    path = _write(tmp_path / "a.jsonl", LINES, "not json hello\n")
    assert search_in_file(path, "hello") == 2


def test_search_in_file_ignores_non_text_blocks(tmp_path):
    path = _write(tmp_path / "a.jsonl", LINES)
    assert search_in_file(path, "zzz") == 0


def test_search_in_missing_file(tmp_path):
    assert search_in_file(tmp_path / "missing.jsonl", "hello") == 0


def test_search_sessions_is_case_insensitive(tmp_path):
    match = _write(tmp_path / "a.jsonl", LINES)
    miss = _write(tmp_path / "b.jsonl", [LINES[0]])
    sessions = [_session(miss, "b"), _session(match, "a")]
    results = search_sessions(sessions, "AGAIN")
    assert results == [SearchResult(session_index=1, match_count=1)]


def test_search_sessions_reports_every_matching_session(tmp_path):
    first = _write(tmp_path / "a.jsonl", LINES)
    second = _write(tmp_path / "b.jsonl", [LINES[0]])
    results = search_sessions([_session(first), _session(second)], "hello")
    assert [r.session_index for r in results] == [0, 1]
    assert [r.match_count for r in results] == [2, 1]


def test_search_sessions_empty_query(tmp_path):
    path = _write(tmp_path / "a.jsonl", LINES)
    assert search_sessions([_session(path)], "") == []


def test_extract_search_text_string_is_unchanged():
    assert extract_search_text("  Spaced text ") == "  Spaced text "


def test_extract_search_text_joins_text_blocks():
    blocks = [{"type": "text", "text": "one"}, {"type": "image"}, {"type": "text", "text": "two"}]
    assert extract_search_text(blocks) == "one two"


def test_extract_search_text_unwraps_nested_content():
    assert extract_search_text({"content": [{"type": "text", "text": "inner"}]}) == "inner"


def test_extract_search_text_null_is_empty():
    assert extract_search_text(None) == ""


def test_extract_search_text_falls_back_to_json():
    value = {"other": 1}
    assert json.loads(extract_search_text(value)) == value


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_delete_session_files_removes_everything_for_the_session(home):
    base = home / ".claude"
    project = base / "projects" / "-proj"
    main = _write(project / "sid.jsonl", LINES)
    agent = _write(project / "agent-sid-1.jsonl", [])
    other_agent = _write(project / "agent-other.jsonl", [])
    other_session = _write(project / "other.jsonl", [])
    (project / "sid" / "sub").mkdir(parents=True)
    debug = _write(base / "debug" / "sid.txt", [])
    history = base / "file-history" / "sid"
    _write(history / "f.txt", [])
    env = base / "session-env" / "sid"
    env.mkdir(parents=True)
    todo = _write(base / "todos" / "sid-agent.json", [])
    other_todo = _write(base / "todos" / "other.json", [])

    delete_session_files(_session(main))

    for gone in (main, agent, project / "sid", debug, history, env, todo):
        assert not gone.exists()
    for kept in (other_agent, other_session, other_todo):
        assert kept.exists()


def test_delete_session_files_tolerates_missing_files(home):
    missing = home / ".claude" / "projects" / "-proj" / "sid.jsonl"
    delete_session_files(_session(missing))
    assert not missing.exists()