"""Websocket server broadcasting pomodoro events and accepting control actions."""

from .config import EventServerConfig, ServerConfigurationError
from .events import ControlMessageError, parse_control_message
from .service import EventServer

__all__ = [
    "ControlMessageError",
    "EventServer",
    "EventServerConfig",
    "ServerConfigurationError",
    "parse_control_message",
]
