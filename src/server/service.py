from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from http import HTTPStatus
from typing import Callable, Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import ServerConnection, broadcast, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from contracts.event_protocol import EVENT_ERROR, EVENT_HELLO

from .config import HEALTHZ_PATH, EventServerConfig
from .events import ControlMessageError, StickyEventStore, make_event, parse_control_message

ControlHandler = Callable[[str], None]


class EventServer:
    """Websocket server running its own asyncio loop on a daemon thread.

    Timer events passed to :meth:`publish` are broadcast to every connected
    client. Incoming ``control`` messages are parsed and handed to
    ``control_handler`` on the server thread; the handler must forward them to
    the timer's own event loop.
    """

    def __init__(
        self,
        config: EventServerConfig,
        *,
        control_handler: Optional[ControlHandler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._control_handler = control_handler
        self._logger = logger or logging.getLogger("event_server")
        self._sticky_events = StickyEventStore()
        self._clients: set[ServerConnection] = set()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._failure: Optional[BaseException] = None

    @property
    def address(self) -> tuple[str, int]:
        return self._config.host, self._config.port

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and self._failure is None

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("Event server is already running")
            return

        self._failure = None
        self._ready.clear()
        self._thread = threading.Thread(target=self._thread_main, name="event-server", daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"Event server did not start within {timeout_seconds:.1f}s")
        if self._failure is not None:
            raise RuntimeError(f"Event server startup failed: {self._failure}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(shutdown.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("Event server thread still alive after %.1fs", timeout_seconds)

        self._thread = None
        self._loop = None
        self._shutdown = None

    def publish(self, event_type: str, **payload) -> None:
        """Serialize one event, remember it if sticky, and broadcast it."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if not self.is_running or loop is None:
            return
        with contextlib.suppress(RuntimeError):
            # Raised when the server loop is already closing.
            loop.call_soon_threadsafe(self._broadcast, message)

    def sticky_events(self) -> list[str]:
        """Latest sticky events, replayed to every newly connected client."""
        return self._sticky_events.snapshot()

    def handle_message(self, message: str | bytes) -> Optional[str]:
        """Dispatch one client message; return an error event to send back, if any."""
        try:
            action = parse_control_message(message)
        except ControlMessageError as error:
            self._logger.warning("Rejected client message: %s", error)
            return make_event(EVENT_ERROR, message=str(error))

        if self._control_handler is None:
            return make_event(EVENT_ERROR, message="Timer control is not available")

        try:
            self._control_handler(action)
        except Exception as error:
            self._logger.error("Control action %s failed: %s", action, error)
            return make_event(EVENT_ERROR, message=f"Control action {action} failed: {error}")

        self._logger.info("Control action forwarded: %s", action)
        return None

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        try:
            loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - needs a bound port to fail
            self._failure = error
            self._logger.error("Event server failed: %s", error, exc_info=True)
            self._ready.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    async def _serve(self) -> None:
        self._shutdown = asyncio.Event()
        host, port = self.address
        async with serve(
            self._handle_client,
            host=host,
            port=port,
            process_request=self._route_http,
            logger=self._logger,
        ):
            self._logger.info("Event server listening on %s", self._config.websocket_url)
            self._ready.set()
            await self._shutdown.wait()

            closing = [
                client.close(code=1001, reason="Server shutting down")
                for client in tuple(self._clients)
            ]
            await asyncio.gather(*closing, return_exceptions=True)
            self._clients.clear()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, message="Pomodoro event stream connected"))
            for sticky in self.sticky_events():
                await websocket.send(sticky)
            async for message in websocket:
                self._logger.debug("Received from client: %s", message)
                reply = self.handle_message(message)
                if reply is not None:
                    await websocket.send(reply)
        except ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._clients.discard(websocket)

    def _route_http(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path == HEALTHZ_PATH:
            return connection.respond(HTTPStatus.OK, "ok\n")
        return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")

    def _broadcast(self, message: str) -> None:
        if self._clients:
            broadcast(self._clients, message)
