from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from hostenv.core.services.browser import DEFAULT_TIMEOUT_MS
from hostenv.core.services.error_codes import ErrorCode, HomeDirectoryError, HostenvError
from hostenv.core.services.observability import log_debug
from hostenv.core.services.platform import Platform
from hostenv.core.services.xdg_paths import resolve_env, config_home, path_separator

APP_NAME = "hostenv"
CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class BrowserSettings:
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    command: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    source: Optional[str]
    browser: BrowserSettings

    def as_dict(self) -> dict:
        return {
            "source": self.source,
            "browser": {
                "timeout_ms": self.browser.timeout_ms,
                "command": list(self.browser.command),
            },
        }


def default_config_path(
    env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None
) -> Optional[str]:
    """
    Locate the user config file.

    Priority:
      1) $HOSTENV_CONFIG
      2) <config-home>/hostenv/config.yaml
      3) None when no home directory is known
    """
    env = resolve_env(env)
    explicit = env.get("HOSTENV_CONFIG")
    if explicit:
        return explicit
    try:
        base = config_home(env, platform)
    except HomeDirectoryError:
        return None
    sep = path_separator(platform)
    return sep.join([base, APP_NAME, CONFIG_FILENAME])


def _parse_timeout(raw: Any) -> Optional[int]:
    if isinstance(raw, bool) or not isinstance(raw, int):
        return None
    if raw < 0:
        return None
    return raw


def _parse_command(raw: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(raw, str) and raw.strip():
        return (raw.strip(),)
    if isinstance(raw, list) and raw and all(isinstance(item, str) and item for item in raw):
        return tuple(raw)
    return None


def _browser_settings(raw: Any) -> BrowserSettings:
    if not isinstance(raw, Mapping):
        return BrowserSettings()

    timeout_ms = _parse_timeout(raw.get("timeout_ms", DEFAULT_TIMEOUT_MS))
    command = _parse_command(raw["command"]) if "command" in raw else ()
    ignored = []
    if timeout_ms is None:
        ignored.append("timeout_ms")
        timeout_ms = DEFAULT_TIMEOUT_MS
    if command is None:
        ignored.append("command")
        command = ()
    if ignored:
        log_debug(operation="debug.config_field_ignored", details={"fields": ignored})
    return BrowserSettings(timeout_ms=timeout_ms, command=command)


def load_app_config(
    path: str | Path | None = None,
    env: Optional[Mapping[str, str]] = None,
    platform: Optional[Platform] = None,
) -> AppConfig:
    """
    Load the optional YAML user config.

    A missing file means defaults. A file that exists but cannot be read or
    parsed is an error, so that a typo does not silently disable settings.

    Raises:
        HostenvError: CONFIG_INVALID for unreadable or malformed files.
    """
    config_path = Path(path) if path is not None else None
    if config_path is None:
        located = default_config_path(env, platform)
        config_path = Path(located) if located else None

    exists = config_path is not None and config_path.is_file()
    log_debug(
        operation="debug.config_located",
        details={"config_path": str(config_path) if config_path else None, "exists": exists},
    )
    if not exists:
        return AppConfig(source=None, browser=BrowserSettings())

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise HostenvError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Failed to load config from {config_path}: {exc}",
            details={"config_path": str(config_path)},
        ) from exc

    if not isinstance(data, Mapping):
        raise HostenvError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Config file {config_path} must contain a mapping",
            details={"config_path": str(config_path)},
        )

    return AppConfig(source=str(config_path), browser=_browser_settings(data.get("browser")))
