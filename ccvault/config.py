"""Per-project statistics stored in ``~/.claude.json``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def claude_dir() -> Path:
    """Return the ``~/.claude`` directory."""
    return Path.home() / ".claude"


def _get(data: dict[str, Any], key: str, kinds: tuple[type, ...], default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) and bool not in kinds:
        raise ValueError(f"field {key!r} has an unexpected type")
    if not isinstance(value, kinds):
        raise ValueError(f"field {key!r} has an unexpected type")
    return value


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not a JSON object")
    return value


@dataclass
class ModelUsage:
    """Token and cost figures for one model."""

    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> ModelUsage:
        data = _object(data, "model usage")
        return cls(
            input_tokens=_get(data, "inputTokens", (int,), 0),
            output_tokens=_get(data, "outputTokens", (int,), 0),
            cost_usd=float(_get(data, "costUSD", (int, float), 0.0)),
        )


@dataclass
class ProjectConfig:
    """Statistics of the last session run in one project."""

    last_session_id: str = ""
    last_cost: float = 0.0
    last_duration: int = 0  # milliseconds
    last_input_tokens: int = 0
    last_output_tokens: int = 0
    last_model_usage: dict[str, ModelUsage] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> ProjectConfig:
        data = _object(data, "project config")
        usage = _object(data.get("lastModelUsage"), "lastModelUsage")
        return cls(
            last_session_id=_get(data, "lastSessionId", (str,), ""),
            last_cost=float(_get(data, "lastCost", (int, float), 0.0)),
            last_duration=_get(data, "lastDuration", (int,), 0),
            last_input_tokens=_get(data, "lastTotalInputTokens", (int,), 0),
            last_output_tokens=_get(data, "lastTotalOutputTokens", (int,), 0),
            last_model_usage={name: ModelUsage.from_dict(item) for name, item in usage.items()},
        )


@dataclass
class ClaudeConfig:
    """The parts of ``~/.claude.json`` this tool uses."""

    projects: dict[str, ProjectConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> ClaudeConfig:
        data = _object(data, "configuration")
        projects = _object(data.get("projects"), "projects")
        return cls(projects={path: ProjectConfig.from_dict(item) for path, item in projects.items()})

    def get_project_config(self, project_path: str) -> ProjectConfig | None:
        """Return the configuration for ``project_path`` or ``None``."""
        return self.projects.get(project_path)


def read_config() -> ClaudeConfig:
    """Read and parse ``~/.claude.json``.

    Raises ``OSError`` when the file cannot be read and ``ValueError`` when
    it is not valid.
    """
    raw = (Path.home() / ".claude.json").read_bytes()
    return ClaudeConfig.from_dict(json.loads(raw.decode("utf-8", "replace")))