"""Optional YAML config: browser version, OS filter, logging, CI failure policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .log import LOG_LEVELS
from .models import OsFilter
from .version import Version


@dataclass
class EngineConfig:
    browser_version: str = "0"
    os_filter: OsFilter = OsFilter.CURRENT_OS
    log_level: str = "warning"
    json_logs: bool = False
    fail_on: list[str] = field(default_factory=list)  # empty = any disabled feature fails --ci


def _from_dict(data: dict[str, Any]) -> EngineConfig:
    cfg = EngineConfig()
    if "browser_version" in data:
        bv = str(data["browser_version"])
        if Version.parse(bv) is None:
            raise ConfigError(f"browser_version is not a dotted version: {bv!r}")
        cfg.browser_version = bv
    if "os_filter" in data:
        try:
            cfg.os_filter = OsFilter(str(data["os_filter"]).lower())
        except ValueError:
            raise ConfigError(f"os_filter must be 'all' or 'current', got {data['os_filter']!r}") from None
    if "log_level" in data:
        level = str(data["log_level"]).lower()
        if level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        cfg.log_level = level
    if "json_logs" in data:
        cfg.json_logs = bool(data["json_logs"])
    if "fail_on" in data:
        fail_on = data["fail_on"] or []
        if isinstance(fail_on, str):
            fail_on = [fail_on]
        if not isinstance(fail_on, list) or not all(isinstance(f, str) for f in fail_on):
            raise ConfigError("fail_on must be a feature name or a list of feature names")
        cfg.fail_on = fail_on
    return cfg


def load_config(path: Path | None) -> EngineConfig:
    """Load config YAML. No path or a missing file gives defaults; unknown keys are ignored."""
    if not path or not Path(path).exists():
        return EngineConfig()
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    return _from_dict(data)
