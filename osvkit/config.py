"""Per-directory scanner configuration: which vulnerabilities to ignore."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from datetime import time as dtime
from typing import Any

CONFIG_NAME = "osv-scanner.toml"

_log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration cannot be found or parsed."""


@dataclass
class IgnoreEntry:
    """A vulnerability to ignore, optionally only until a given time."""

    id: str = ""
    ignore_until: datetime | None = None
    reason: str = ""


@dataclass
class Config:
    """A loaded configuration."""

    ignored_vulns: list[IgnoreEntry] = field(default_factory=list)
    load_path: str = ""

    def should_ignore(self, vuln_id: str) -> tuple[bool, IgnoreEntry | None]:
        """Whether `vuln_id` is ignored now, with the entry that matched it."""
        entry = next((e for e in self.ignored_vulns if e.id == vuln_id), None)
        if entry is None:
            return False, None
        if entry.ignore_until is None:
            return True, entry
        return entry.ignore_until > datetime.now(timezone.utc), entry


def _parse_ignore_until(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        # times without an offset are taken as local time
        return value if value.tzinfo is not None else value.astimezone()
    if isinstance(value, date):
        return datetime.combine(value, dtime()).astimezone()
    raise ConfigError(f"ignoreUntil must be a date or date-time, not {value!r}")


def _config_from_toml(data: dict[str, Any]) -> Config:
    entries = data.get("IgnoredVulns", [])
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ConfigError("IgnoredVulns must be an array of tables")
    return Config(
        ignored_vulns=[
            IgnoreEntry(
                id=str(entry.get("id", "")),
                ignore_until=_parse_ignore_until(entry.get("ignoreUntil")),
                reason=str(entry.get("reason", "")),
            )
            for entry in entries
        ]
    )


def _load(config_path: str) -> Config:
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"failed to parse config file: {exc}") from exc
    config = _config_from_toml(data)
    config.load_path = config_path
    return config


def normalize_config_load_path(target: str) -> str:
    """The config path in `target` if it is a directory, else beside it."""
    try:
        is_dir = os.path.isdir(target) if os.stat(target) else False
    except OSError as exc:
        raise ConfigError(f"failed to stat target: {exc}") from exc
    folder = target if is_dir else os.path.dirname(target)
    return os.path.join(folder, CONFIG_NAME)


def try_load_config(config_path: str) -> Config:
    """Load the config at `config_path`, raising ConfigError if it is absent or bad."""
    try:
        return _load(config_path)
    except OSError as exc:
        raise ConfigError(f"no config file found on this path: {config_path}") from exc


@dataclass
class ConfigManager:
    """Finds and caches the config that applies to each scanned path."""

    override_config: Config | None = None
    default_config: Config = field(default_factory=Config)
    config_map: dict[str, Config] = field(default_factory=dict)

    def use_override(self, config_path: str) -> None:
        """Use the config at `config_path` for every target."""
        self.override_config = _load(config_path)

    def get(self, target_path: str) -> Config:
        """The config that applies to `target_path`."""
        if self.override_config is not None:
            return self.override_config

        try:
            config_path = normalize_config_load_path(target_path)
        except ConfigError:
            return Config()

        cached = self.config_map.get(config_path)
        if cached is not None:
            return cached

        try:
            config = try_load_config(config_path)
            _log.info("Loaded filter from: %s", config.load_path)
        except ConfigError:
            config = self.default_config

        self.config_map[config_path] = config
        return config