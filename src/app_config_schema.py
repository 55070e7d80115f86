"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pomodoro.constants import (
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_TICK_SECONDS,
    DEFAULT_WORKING_SECONDS,
)

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class PomodoroSettings:
    """Phase durations and cycle options loaded from `[pomodoro]`."""
    working_seconds: float = DEFAULT_WORKING_SECONDS
    short_break_seconds: float = DEFAULT_SHORT_BREAK_SECONDS
    long_break_seconds: float = DEFAULT_LONG_BREAK_SECONDS
    tick_seconds: float = DEFAULT_TICK_SECONDS
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
    continuous: bool = True
    until: Optional[int] = None


@dataclass(frozen=True)
class EventServerSettings:
    """Websocket event server settings from `[event_server]`."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    pomodoro: PomodoroSettings
    event_server: EventServerSettings
    source_file: Optional[str]
