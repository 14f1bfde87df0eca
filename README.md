# ccvault

ccvault is a full-screen terminal browser for Claude Code sessions. It reads
the session logs under `~/.claude/projects/`. You can browse them by project,
preview a conversation, search the messages, and rename, export, delete or
prune sessions. When you pick a session, ccvault changes to that session's
project directory and replaces itself with `claude --resume <id>`.

## Installation

```
pip install .
```

This installs the `ccvault` command. The only option it accepts is `--help`.

## Usage

```
ccvault
```

The screen has three panels:

- **Projects** lists every directory under `~/.claude/projects/`, with the most recently modified first. The path shown for each one is the `cwd` recorded in its first session log. If no session log records one, the path is decoded from the directory name. ccvault opens on the project that matches the current directory, or on the first project if none matches.
- **Sessions** lists the sessions of the selected project, newest first. Each row shows the date (day/month) and a name. The name is the session's custom title, or else its first user message, cut to 60 characters. 📌 marks the session that `~/.claude.json` records as the project's last session. ● marks a selected session.
- **Preview** shows the conversation of the selected session. When the panel is not focused, it shows only the first and last user/assistant exchange, fitted to the panel height. When it is focused, it shows every message and you can scroll with `↑`/`↓`. A footer shows the branch and the message count. For the pinned session it also shows the last cost, token count and duration from `~/.claude.json`.

### Keys

| Key | Action |
| --- | --- |
| `↑`/`↓` or `j`/`k` | Move within a panel, or scroll the preview |
| `←`/`→` or `h`/`l` | Switch panels |
| `Tab` | Cycle panels |
| `Enter` | Resume the selected session (in the projects panel: move to sessions) |
| `r` | Rename the session: a `custom-title` entry is appended to its log; an empty name clears it |
| `d` | Delete the session and its associated files, after confirmation |
| `x` | Export the session as Markdown to `~/Desktop/<name>.md` |
| `c` | Copy `cd '<project>' && claude --resume '<id>'` to the clipboard |
| `Space` | Toggle selection for bulk operations |
| `D` | Delete all selected sessions, after confirmation |
| `X` | Export all selected sessions to `~/Desktop/` |
| `P` | Prune sessions that hold no user or assistant messages, after confirmation |
| `/` | Search the message text of all sessions in the project, ignoring case |
| `Esc` | Clear search results |
| `?` | Toggle help |
| `q` / `Ctrl+C` | Quit |

Deleting a session removes the following:

- its `.jsonl` log
- the `agent-*` files in the project directory whose names contain the session id
- a directory named after the session id, if one exists
- `~/.claude/debug/<id>.txt`
- `~/.claude/file-history/<id>` and `~/.claude/session-env/<id>`
- the files in `~/.claude/todos/` whose names start with the session id

Copying uses `pbcopy`, `xclip` or `xsel`, whichever is found first. If none is found, the status bar says that the clipboard is not available.

## Using the modules

The modules can also be used without the browser:

- `ccvault.projects`: `discover_projects()`, `decode_path()`, `shorten_path()`, `find_project_index()`
- `ccvault.sessions`: `load_sessions()`, `count_conversation_messages()`, `read_custom_title()`, `write_custom_title()`
- `ccvault.messages`: `load_preview()` and `export_session()`, which renders a session as Markdown
- `ccvault.search`: `search_sessions()` and `delete_session_files()`
- `ccvault.config`: `read_config()` for the per-project figures in `~/.claude.json`
- `ccvault.names`: `load_names()`, `save_names()`, `set_name()` and `delete_name()` for a name map in `~/.claude/session-names.json`

## Limits

- The browser does not read `~/.claude/session-names.json`. Session names come only from the `custom-title` entries in the session logs.
- Exports always go to `~/Desktop/`, and there is no option to choose another directory.
- There is no clipboard support on systems without `pbcopy`, `xclip` or `xsel`.

## Running the tests

```
pip install ".[test]"
pytest
```