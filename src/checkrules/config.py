"""CheckRulesConfig dataclass and loader for evaluation settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_FILENAME = ".checkrules.json"


@dataclass
class CheckRulesConfig:
    trace_enabled: bool = True
    snapshot_context: bool = True


def load_check_rules_config(path: Path | None = None) -> CheckRulesConfig:
    """Load check rules config with env var overrides.

    Reads .checkrules.json in the working directory when no path is given.
    """
    config = CheckRulesConfig()
    if path is None:
        path = Path(DEFAULT_CONFIG_FILENAME)
    if path.exists():
        try:
            text = path.read_text()
            if text.strip():
                data = json.loads(text)
                section = data.get("check_rules", {}) if isinstance(data, dict) else {}
                if isinstance(section, dict):
                    _apply(config, section)
        except (json.JSONDecodeError, OSError):
            pass
    if env_val := os.environ.get("CHECKRULES_TRACE_ENABLED"):
        config.trace_enabled = _truthy(env_val)
    if env_val := os.environ.get("CHECKRULES_SNAPSHOT_CONTEXT"):
        config.snapshot_context = _truthy(env_val)
    return config


def _truthy(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply(cfg: CheckRulesConfig, data: dict[str, object]) -> None:
    if "trace_enabled" in data and isinstance(data["trace_enabled"], bool):
        cfg.trace_enabled = data["trace_enabled"]
    if "snapshot_context" in data and isinstance(data["snapshot_context"], bool):
        cfg.snapshot_context = data["snapshot_context"]
