from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    EventServerSettings,
    PomodoroSettings,
)

CONFIG_FILE_ENV = "APP_CONFIG_FILE"

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "EventServerSettings",
    "PomodoroSettings",
    "load_app_config",
    "resolve_config_path",
    "source_description",
]


def resolve_config_path(
    config_path: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> tuple[Path, bool]:
    """Return the config path and whether it was requested explicitly."""
    env = environ if environ is not None else os.environ
    env_path = env.get(CONFIG_FILE_ENV, "").strip() or None
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path, bool(config_path or env_path)


def load_app_config(
    config_path: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    path, explicit = resolve_config_path(config_path, environ=environ)
    if not path.exists():
        if explicit:
            raise AppConfigurationError(f"Config file not found: {path}")
        return parse_app_config({}, source_file=None)
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    return parse_app_config(raw, source_file=str(path))


def source_description(app_config: AppConfig) -> str:
    return app_config.source_file or "built-in defaults"
