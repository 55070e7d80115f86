"""Typed parser turning config.toml tables into pomodoro app settings."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, TypeVar

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    EventServerSettings,
    PomodoroSettings,
)

T = TypeVar("T")

_DEFAULT_POMODORO = PomodoroSettings()
_DEFAULT_EVENT_SERVER = EventServerSettings()
_DURATION_FIELDS = ("working_seconds", "short_break_seconds", "long_break_seconds")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    source_file: Optional[str],
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        pomodoro=_parse_pomodoro_settings(_section(raw, "pomodoro")),
        event_server=_parse_event_server_settings(_section(raw, "event_server")),
        source_file=source_file,
    )


def _parse_pomodoro_settings(section: Mapping[str, Any]) -> PomodoroSettings:
    defaults = _DEFAULT_POMODORO

    def read(name: str, coerce: Callable[[Any, str], T]) -> T:
        return _field(section, "pomodoro", name, getattr(defaults, name), coerce)

    until_raw = section.get("until")
    settings = PomodoroSettings(
        working_seconds=read("working_seconds", _as_float),
        short_break_seconds=read("short_break_seconds", _as_float),
        long_break_seconds=read("long_break_seconds", _as_float),
        tick_seconds=read("tick_seconds", _as_float),
        long_break_interval=read("long_break_interval", _as_int),
        continuous=read("continuous", _as_bool),
        until=None if until_raw is None else _as_int(until_raw, "pomodoro.until"),
    )
    _validate_pomodoro_settings(settings)
    return settings


def _validate_pomodoro_settings(settings: PomodoroSettings) -> None:
    negative = [name for name in _DURATION_FIELDS if getattr(settings, name) < 0]
    if negative:
        joined = ", ".join(f"pomodoro.{name}" for name in negative)
        raise AppConfigurationError(f"Durations must not be negative: {joined}.")
    if not any(getattr(settings, name) for name in _DURATION_FIELDS):
        raise AppConfigurationError(
            "pomodoro.working_seconds, short_break_seconds and long_break_seconds "
            "cannot all be zero."
        )
    if settings.tick_seconds <= 0:
        raise AppConfigurationError("pomodoro.tick_seconds must be greater than zero.")
    if settings.long_break_interval < 1:
        raise AppConfigurationError("pomodoro.long_break_interval must be at least 1.")
    if settings.until is not None and settings.until < 1:
        raise AppConfigurationError("pomodoro.until must be at least 1.")


def _parse_event_server_settings(section: Mapping[str, Any]) -> EventServerSettings:
    defaults = _DEFAULT_EVENT_SERVER
    return EventServerSettings(
        enabled=_field(section, "event_server", "enabled", defaults.enabled, _as_bool),
        host=_field(section, "event_server", "host", defaults.host, _as_str),
        port=_field(section, "event_server", "port", defaults.port, _as_int),
    )


def _field(
    section: Mapping[str, Any],
    section_name: str,
    name: str,
    default: Any,
    coerce: Callable[[Any, str], T],
) -> T:
    return coerce(section.get(name, default), f"{section_name}.{name}")


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    table = root.get(name)
    if table is None:
        return {}
    if isinstance(table, Mapping):
        return table
    raise AppConfigurationError(f"[{name}] must be a table.")


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise AppConfigurationError(f"{field} must be a string.")
    return value.strip()


_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUTHY:
            return True
        if word in _FALSY:
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    # bool is an int subclass; `true` is not a cycle count.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a number.") from error
    raise AppConfigurationError(f"{field} must be a number.")
