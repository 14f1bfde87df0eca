"""The interactive session browser and its command entry point."""

from __future__ import annotations

import argparse
import dataclasses
import os
import queue
import shutil
import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from .config import ClaudeConfig, ProjectConfig, read_config
from .dialog import Dialog, DialogType, render_dialog
from .messages import PreviewData, export_session, load_preview
from .panels import render_projects_panel, render_sessions_panel
from .preview import PreviewCache, build_preview_cache, build_summary_lines, render_preview_panel
from .projects import Project, discover_projects, find_project_index
from .search import SearchResult, delete_session_files, search_sessions
from .sessions import Session, count_conversation_messages, load_sessions, write_custom_title
from .styles import (
    HELP_DESC_STYLE,
    HELP_KEY_STYLE,
    SEARCH_STYLE,
    STATUS_BAR_STYLE,
    join_horizontal,
    join_vertical,
)

SPINNER_CHARS = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
STATUS_TIMEOUT = 5.0
TICK_INTERVAL = 0.1
_EXPORT_NAME_LIMIT = 50

_STATUS_KEYS = (
    ("↑↓", "navigate"),
    ("←→", "panels"),
    ("enter", "resume"),
    ("r", "rename"),
    ("d", "delete"),
    ("x", "export"),
    ("c", "copy cmd"),
    ("space", "select"),
    ("P", "prune"),
    ("/", "search"),
    ("?", "help"),
    ("q", "quit"),
)

_NO_SELECTION = "No sessions selected (use Space to select)"


class Panel(IntEnum):
    """The three panels of the main view."""

    PROJECTS = 0
    SESSIONS = 1
    PREVIEW = 2


@dataclass
class ResumeRequest:
    """A session the user chose to resume after leaving the browser."""

    session_id: str
    project_dir: str


def _is_printable(key: str) -> bool:
    return len(key.encode("utf-8")) == 1 and ord(key) >= 32


def _export_file_name(session: Session) -> str:
    name = session.display_name().replace("/", "-").replace(" ", "_")
    return name[:_EXPORT_NAME_LIMIT] + ".md"


def copy_to_clipboard(text: str) -> bool:
    """Copy ``text`` with the first clipboard tool found; return whether it worked."""
    for command in (["pbcopy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]):
        if shutil.which(command[0]) is None:
            continue
        try:
            subprocess.run(command, input=text.encode("utf-8"), check=True)
        except (OSError, subprocess.CalledProcessError):
            return False
        return True
    return False


def render_status_bar(width: int, search_active: bool) -> str:
    """Render the key hints shown at the bottom of the screen."""
    keys = list(_STATUS_KEYS)
    if search_active:
        keys.insert(0, ("esc", "clear search"))
    line = "  ".join(HELP_KEY_STYLE.render(k) + " " + HELP_DESC_STYLE.render(d) for k, d in keys)
    return STATUS_BAR_STYLE.with_width(width).render(line)


class Model:
    """State of the browser and its reaction to keys."""

    def __init__(
        self,
        projects: list[Project] | None = None,
        config: ClaudeConfig | None = None,
        cwd: str = "",
    ) -> None:
        self.projects: list[Project] = list(projects or [])
        self.sessions: list[Session] = []
        self.preview: PreviewData | None = None
        self.config = config

        self.active_panel = Panel.SESSIONS
        self.project_idx = find_project_index(self.projects, cwd)
        self.session_idx = 0
        self.preview_scroll = 0
        self.preview_line_count = 0
        self.preview_cache: PreviewCache | None = None

        self.dialog: Dialog | None = None

        self.searching = False
        self.search_query = ""
        self.search_results: list[SearchResult] = []
        self.filtered_sessions: list[Session] | None = None
        self.search_active = False
        self.search_in_progress = False
        self.search_spinner = 0
        self.pending_search: str | None = None

        self.resume_session: ResumeRequest | None = None
        self.done = False

        self.width = 0
        self.height = 0

        self.status_msg = ""
        self.status_time = 0.0

        if self.projects:
            self.load_sessions()

    # -- data -----------------------------------------------------------

    def _current_project(self) -> Project | None:
        if 0 <= self.project_idx < len(self.projects):
            return self.projects[self.project_idx]
        return None

    def _current_project_config(self) -> ProjectConfig | None:
        project = self._current_project()
        if project is None or self.config is None:
            return None
        return self.config.get_project_config(project.full_path)

    def _set_status(self, message: str) -> None:
        self.status_msg = message
        self.status_time = time.monotonic()

    def load_sessions(self) -> None:
        """Load the sessions of the selected project and preview the first."""
        project = self._current_project()
        if project is None:
            self.sessions = []
            self.preview = None
            return
        config = self._current_project_config()
        last_session_id = config.last_session_id if config is not None else ""
        try:
            sessions = load_sessions(project.encoded_name, last_session_id)
        except OSError:
            self.sessions = []
            self.preview = None
            return

        self.sessions = sessions
        self.session_idx = 0
        self.search_results = []
        self.filtered_sessions = None
        self.search_active = False
        self.searching = False
        self.search_query = ""
        self.load_preview()

    def load_preview(self) -> None:
        """Load and pre-render the preview of the selected session."""
        sessions = self.active_sessions()
        if not 0 <= self.session_idx < len(sessions):
            self.preview = None
            self.preview_cache = None
            return
        session = sessions[self.session_idx]
        try:
            preview = load_preview(session.file_path)
        except (OSError, ValueError):
            self.preview = None
            self.preview_cache = None
            return
        self.preview = preview
        self.preview_scroll = 0
        self.preview_cache = build_preview_cache(
            preview, session, self._current_project_config(), self.width // 2 - 6
        )

    def active_sessions(self) -> list[Session]:
        """Return the search results when a search is shown, else all sessions."""
        if self.search_active and self.filtered_sessions is not None:
            return self.filtered_sessions
        return self.sessions

    def selected_session(self) -> Session | None:
        """Return the session under the cursor, if any."""
        sessions = self.active_sessions()
        if 0 <= self.session_idx < len(sessions):
            return sessions[self.session_idx]
        return None

    # -- events ---------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Record a new screen size and re-render the preview for it."""
        self.width = width
        self.height = height
        if self.preview is not None:
            preview_width = width - width // 4 - width // 4
            self.preview_cache = build_preview_cache(
                self.preview, self.selected_session(), self._current_project_config(), preview_width - 6
            )

    def apply_search_results(self, results: list[SearchResult], query: str) -> None:
        """Show the sessions that matched a finished search."""
        self.search_in_progress = False
        self.search_results = list(results)
        self.search_query = query
        self.search_active = True
        self.filtered_sessions = [
            dataclasses.replace(self.sessions[r.session_index])
            for r in results
            if r.session_index < len(self.sessions)
        ]
        self.session_idx = 0
        self.active_panel = Panel.SESSIONS
        self.load_preview()

    def tick(self) -> None:
        """Advance the search spinner while a search runs."""
        if self.search_in_progress:
            self.search_spinner += 1

    def clear_status(self) -> None:
        """Clear the status bar message."""
        self.status_msg = ""

    def handle_key(self, key: str) -> None:
        """React to a key, given by name (``"up"``, ``"enter"``, ``"q"``, ...)."""
        if self.search_in_progress:
            if key in ("ctrl+c", "q"):
                self.done = True
            return
        if self.dialog is not None and self.dialog.kind != DialogType.NONE:
            self._dialog_key(key)
            return
        if self.searching:
            self._search_key(key)
            return

        if key in ("ctrl+c", "q"):
            self.done = True
        elif key == "?":
            self.dialog = Dialog(kind=DialogType.HELP)
        elif key == "esc":
            if self.search_active:
                self.search_results = []
                self.filtered_sessions = None
                self.search_active = False
                self.search_query = ""
                self.session_idx = 0
                self.load_preview()
        elif key == "/":
            self.searching = True
            self.search_query = ""
        elif key == "tab":
            self.active_panel = Panel((self.active_panel + 1) % 3)
            if self.active_panel == Panel.PREVIEW:
                self.preview_scroll = 0
        elif key in ("left", "h"):
            if self.active_panel > Panel.PROJECTS:
                self.active_panel = Panel(self.active_panel - 1)
        elif key in ("right", "l"):
            if self.active_panel < Panel.PREVIEW:
                self.active_panel = Panel(self.active_panel + 1)
                if self.active_panel == Panel.PREVIEW:
                    self.preview_scroll = 0
        elif key in ("up", "k"):
            self._move_up()
        elif key in ("down", "j"):
            self._move_down()
        else:
            action = {
                "enter": self._enter,
                "r": self._rename,
                "d": self._delete,
                "x": self._export,
                " ": self._toggle_select,
                "D": self._bulk_delete,
                "X": self._bulk_export,
                "P": self._prune,
                "c": self._copy_command,
            }.get(key)
            if action is not None:
                action()

    def _dialog_key(self, key: str) -> None:
        dialog = self.dialog
        assert dialog is not None
        if dialog.kind == DialogType.HELP:
            if key in ("?", "esc", "q"):
                self.dialog = None
        elif dialog.kind in (
            DialogType.CONFIRM_DELETE,
            DialogType.CONFIRM_BULK_DELETE,
            DialogType.CONFIRM_PRUNE,
        ):
            if key in ("y", "Y"):
                if dialog.kind == DialogType.CONFIRM_DELETE:
                    self._execute_delete()
                elif dialog.kind == DialogType.CONFIRM_PRUNE:
                    self._execute_prune()
                else:
                    self._execute_bulk_delete()
            elif key in ("n", "N", "esc"):
                self.dialog = None
        elif dialog.kind == DialogType.RENAME:
            if key == "esc":
                self.dialog = None
            elif key == "enter":
                self._execute_rename()
            elif key == "backspace":
                dialog.input = dialog.input[:-1]
            elif _is_printable(key):
                dialog.input += key

    def _search_key(self, key: str) -> None:
        if key == "esc":
            self.searching = False
            self.search_query = ""
            self.search_results = []
            self.filtered_sessions = None
            self.session_idx = 0
            self.load_preview()
        elif key == "enter":
            self.searching = False
            if self.search_query:
                self.search_in_progress = True
                self.search_spinner = 0
                self.pending_search = self.search_query
        elif key == "backspace":
            self.search_query = self.search_query[:-1]
        elif _is_printable(key):
            self.search_query += key

    def _move_up(self) -> None:
        if self.active_panel == Panel.PROJECTS:
            if self.project_idx > 0:
                self.project_idx -= 1
                self.load_sessions()
        elif self.active_panel == Panel.SESSIONS:
            if self.session_idx > 0:
                self.session_idx -= 1
                self.load_preview()
        elif self.preview_scroll > 0:
            self.preview_scroll -= 1

    def _move_down(self) -> None:
        if self.active_panel == Panel.PROJECTS:
            if self.project_idx < len(self.projects) - 1:
                self.project_idx += 1
                self.load_sessions()
        elif self.active_panel == Panel.SESSIONS:
            if self.session_idx < len(self.active_sessions()) - 1:
                self.session_idx += 1
                self.load_preview()
        else:
            self.preview_scroll += 1

    def _enter(self) -> None:
        if self.active_panel == Panel.PROJECTS:
            self.active_panel = Panel.SESSIONS
            return
        session = self.selected_session()
        if session is None:
            return
        project = self._current_project()
        self.resume_session = ResumeRequest(
            session_id=session.id, project_dir=project.full_path if project else ""
        )
        self.done = True

    def _rename(self) -> None:
        if self.active_panel != Panel.SESSIONS:
            return
        session = self.selected_session()
        if session is not None:
            self.dialog = Dialog(kind=DialogType.RENAME, input=session.custom_name)

    def _execute_rename(self) -> None:
        session = self.selected_session()
        if session is None or self.dialog is None:
            self.dialog = None
            return
        name = self.dialog.input.strip()
        try:
            write_custom_title(session.file_path, session.id, name)
        except OSError:
            pass
        self.load_sessions()
        self.dialog = None
        self._set_status(f'Session renamed to "{name}"' if name else "Session name cleared")

    def _delete(self) -> None:
        if self.active_panel != Panel.SESSIONS:
            return
        session = self.selected_session()
        if session is None:
            return
        self.dialog = Dialog(
            kind=DialogType.CONFIRM_DELETE,
            message=f'Delete session "{session.display_name()}"?\n'
            "This will remove all associated files.",
        )

    def _execute_delete(self) -> None:
        session = self.selected_session()
        if session is None:
            self.dialog = None
            return
        delete_session_files(session)
        self.dialog = None
        self._set_status("Session deleted")
        self.load_sessions()

    def _project_display(self) -> str:
        project = self._current_project()
        return project.display_path if project else ""

    def _export(self) -> None:
        if self.active_panel != Panel.SESSIONS:
            return
        session = self.selected_session()
        if session is None:
            return
        try:
            document = export_session(session, self._project_display())
            path = Path.home() / "Desktop" / _export_file_name(session)
            path.write_text(document, encoding="utf-8")
        except (OSError, ValueError) as err:
            self._set_status(f"Export failed: {err}")
            return
        self._set_status(f"Exported to {path}")

    def _copy_command(self) -> None:
        session = self.selected_session()
        if session is None:
            return
        parts = []
        project = self._current_project()
        if project is not None:
            parts.append(f"cd '{project.full_path}'")
        parts.append(f"claude --resume '{session.id}'")
        command = " && ".join(parts)
        if copy_to_clipboard(command):
            self._set_status("Copied: " + command)
        else:
            self._set_status("Clipboard not available")

    def _toggle_select(self) -> None:
        if self.active_panel != Panel.SESSIONS:
            return
        sessions = self.active_sessions()
        if not 0 <= self.session_idx < len(sessions):
            return
        target_id = sessions[self.session_idx].id
        for session in self.sessions:
            if session.id == target_id:
                session.selected = not session.selected
                break
        filtered = self.filtered_sessions
        if filtered is not None and self.session_idx < len(filtered):
            filtered[self.session_idx].selected = not filtered[self.session_idx].selected

    def _bulk_delete(self) -> None:
        selected = [s.id for s in self.sessions if s.selected]
        if not selected:
            self._set_status(_NO_SELECTION)
            return
        self.dialog = Dialog(
            kind=DialogType.CONFIRM_BULK_DELETE,
            message=f"Delete {len(selected)} selected sessions?\nThis cannot be undone.",
            session_ids=selected,
        )

    def _execute_bulk_delete(self) -> None:
        doomed = [s for s in self.sessions if s.selected]
        for session in doomed:
            delete_session_files(session)
        self.dialog = None
        self._set_status(f"Deleted {len(doomed)} sessions")
        self.load_sessions()

    def _prune(self) -> None:
        for session in self.sessions:
            if session.conversation_count < 0:
                session.conversation_count = count_conversation_messages(session.file_path)
        empty = [s.id for s in self.sessions if s.conversation_count == 0]
        if not empty:
            self._set_status("No empty sessions to prune")
            return
        self.dialog = Dialog(
            kind=DialogType.CONFIRM_PRUNE,
            message=f"Found {len(empty)} empty sessions (0 messages).\nDelete all of them?",
            session_ids=empty,
        )

    def _execute_prune(self) -> None:
        doomed = [s for s in self.sessions if s.conversation_count == 0]
        for session in doomed:
            delete_session_files(session)
        self.dialog = None
        self._set_status(f"Pruned {len(doomed)} empty sessions")
        self.load_sessions()

    def _bulk_export(self) -> None:
        selected = [s for s in self.sessions if s.selected]
        if not selected:
            self._set_status(_NO_SELECTION)
            return
        project_display = self._project_display()
        desktop = Path.home() / "Desktop"
        count = 0
        for session in selected:
            try:
                document = export_session(session, project_display)
                (desktop / _export_file_name(session)).write_text(document, encoding="utf-8")
            except (OSError, ValueError):
                continue
            count += 1
        self._set_status(f"Exported {count} sessions to ~/Desktop/")

    # -- drawing --------------------------------------------------------

    def view(self) -> str:
        """Render the whole screen."""
        if self.width == 0 or self.height == 0:
            return "Loading..."

        panel_height = self.height - 2 - 1
        project_width = max(self.width // 4, 20)
        session_width = max(self.width // 4, 25)
        preview_width = self.width - self.width // 4 - self.width // 4

        projects_panel = render_projects_panel(
            self.projects, self.project_idx, self.active_panel == Panel.PROJECTS,
            project_width, panel_height,
        )
        sessions_panel = render_sessions_panel(
            self.active_sessions(), self.session_idx, self.active_panel == Panel.SESSIONS,
            session_width, panel_height, self.search_active, self.search_query,
        )

        session = self.selected_session()
        branch = session.git_branch if session is not None else ""
        msg_count = self.preview.total_messages if self.preview is not None else 0
        lines: list[str] = []
        if self.preview_cache is not None:
            if self.active_panel == Panel.PREVIEW:
                lines = self.preview_cache.all_lines
            else:
                lines = build_summary_lines(self.preview_cache, panel_height)
        preview_panel, self.preview_line_count = render_preview_panel(
            lines, self.active_panel == Panel.PREVIEW, preview_width, panel_height,
            self.preview_scroll, branch, msg_count,
        )

        panels = join_horizontal(projects_panel, sessions_panel, preview_panel)
        status_style = STATUS_BAR_STYLE.with_width(self.width)
        if self.search_in_progress:
            spinner = SPINNER_CHARS[self.search_spinner % len(SPINNER_CHARS)]
            status = status_style.render(SEARCH_STYLE.render(spinner + " Searching..."))
        elif self.searching:
            status = status_style.render(SEARCH_STYLE.render("/ ") + self.search_query + "█")
        elif self.status_msg:
            status = status_style.render(self.status_msg)
        else:
            status = render_status_bar(self.width, self.search_active)

        screen = join_vertical(panels, status)
        if self.dialog is not None and self.dialog.kind != DialogType.NONE:
            overlay = render_dialog(self.dialog, self.width, self.height)
            if overlay:
                return overlay
        return screen


_SEQUENCE_KEYS = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_TAB": "tab",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "backspace",
}

_CHAR_KEYS = {
    "\x03": "ctrl+c",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b": "esc",
}


def _key_name(keystroke) -> str:
    if keystroke.is_sequence:
        return _SEQUENCE_KEYS.get(keystroke.name or "", "")
    text = str(keystroke)
    if text in _CHAR_KEYS:
        return _CHAR_KEYS[text]
    if len(text) == 1 and ord(text) < 32:
        return "ctrl+" + chr(ord(text) + 96)
    return text


def _initial_model() -> Model:
    try:
        config: ClaudeConfig | None = read_config()
    except (OSError, ValueError):
        config = None
    try:
        projects = discover_projects()
    except OSError:
        projects = []
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = ""
    return Model(projects, config, cwd)


def _search_worker(sessions: list[Session], query: str, results: queue.Queue) -> None:
    results.put((search_sessions(sessions, query), query))


def run_app() -> ResumeRequest | None:
    """Run the browser full-screen; return the session chosen for resuming."""
    from blessed import Terminal

    model = _initial_model()
    term = Terminal()
    finished: queue.Queue = queue.Queue()
    last_tick = time.monotonic()
    last_screen = None

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        try:
            while not model.done:
                if (term.width, term.height) != (model.width, model.height):
                    model.resize(term.width, term.height)
                screen = model.view()
                if screen != last_screen:
                    print(term.home + term.clear + screen, end="", flush=True)
                    last_screen = screen

                keystroke = term.inkey(timeout=TICK_INTERVAL)
                if keystroke:
                    name = _key_name(keystroke)
                    if name:
                        model.handle_key(name)

                if model.pending_search is not None:
                    query, model.pending_search = model.pending_search, None
                    threading.Thread(
                        target=_search_worker,
                        args=(list(model.sessions), query, finished),
                        daemon=True,
                    ).start()
                try:
                    found, query = finished.get_nowait()
                except queue.Empty:
                    pass
                else:
                    model.apply_search_results(found, query)

                now = time.monotonic()
                if model.search_in_progress and now - last_tick >= TICK_INTERVAL:
                    model.tick()
                    last_tick = now
                if model.status_msg and now - model.status_time >= STATUS_TIMEOUT:
                    model.clear_status()
        except KeyboardInterrupt:
            return None
    return model.resume_session


def main(argv: list[str] | None = None) -> int:
    """Browse sessions and optionally resume the chosen one."""
    parser = argparse.ArgumentParser(
        prog="cc-vault", description="Browse, search and manage Claude Code sessions."
    )
    parser.parse_args(argv)

    try:
        resume = run_app()
    except OSError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    if resume is None:
        return 0

    if resume.project_dir:
        try:
            os.chdir(resume.project_dir)
        except OSError as err:
            print(f"Failed to change to project dir: {err}", file=sys.stderr)

    claude = shutil.which("claude")
    if claude is None:
        print("claude not found in PATH", file=sys.stderr)
        return 1
    try:
        os.execv(claude, ["claude", "--resume", resume.session_id])
    except OSError as err:
        print(f"Failed to exec claude: {err}", file=sys.stderr)
        return 1
    return 0