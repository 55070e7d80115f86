"""Configuration model for the websocket event and control server."""

from __future__ import annotations

from dataclasses import dataclass


class ServerConfigurationError(Exception):
    """Raised when event server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
HEALTHZ_PATH = "/healthz"
_PORT_RANGE = range(1, 65536)


@dataclass(frozen=True)
class EventServerConfig:
    """Validated `[event_server]` options; disabled unless asked for."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("event_server.host cannot be empty")
        if self.port not in _PORT_RANGE:
            raise ServerConfigurationError(
                f"event_server.port must be between 1 and 65535, got: {self.port}"
            )

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def websocket_url(self) -> str:
        return f"ws://{self.host}:{self.port}{WEBSOCKET_PATH}"

    @classmethod
    def from_settings(cls, settings) -> "EventServerConfig":
        return cls(enabled=bool(settings.enabled), host=settings.host, port=settings.port)
