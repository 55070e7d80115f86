import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Callable, Optional

from app_config import (
    AppConfigurationError,
    PomodoroSettings,
    load_app_config,
    source_description,
)
from contracts.event_protocol import CONTROL_ABORT, CONTROL_PAUSE, CONTROL_RESUME
from pomodoro import Clock, Pomodoro, PomodoroConfigurationError
from runtime import (
    ControllerDetachedError,
    PomodoroClient,
    PomodoroEvent,
    RuntimeEventPublisher,
    start,
)
from server import EventServer, EventServerConfig, ServerConfigurationError


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_app")


def build_pomodoro(settings: PomodoroSettings) -> Pomodoro:
    """Build the three phase clocks and the machine from `[pomodoro]` settings."""
    tick = settings.tick_seconds
    return Pomodoro(
        Clock.from_seconds(settings.working_seconds, tick),
        Clock.from_seconds(settings.short_break_seconds, tick),
        Clock.from_seconds(settings.long_break_seconds, tick),
        long_break_interval=settings.long_break_interval,
        continuous=settings.continuous,
        until=settings.until,
        logger=logging.getLogger("pomodoro"),
    )


def setup_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    client: PomodoroClient,
    logger: logging.Logger,
) -> Callable[[int], None]:
    """Abort the timer on SIGTERM and SIGINT; returns the installed handler."""
    abort_tasks: set[asyncio.Task[None]] = set()

    def signal_handler(signum: int) -> None:
        signal_name = signal.Signals(signum).name
        logger.info("%s received, stopping...", signal_name)
        # The loop holds tasks weakly.
        task = loop.create_task(_abort(client, logger))
        abort_tasks.add(task)
        task.add_done_callback(abort_tasks.discard)

    for signum in (signal.SIGTERM, signal.SIGINT):
        # Not available on Windows event loops.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, signal_handler, signum)
    return signal_handler


async def _abort(client: PomodoroClient, logger: logging.Logger) -> None:
    try:
        await client.abort()
    except ControllerDetachedError:
        logger.debug("Abort ignored: controller already detached")


def make_control_handler(
    loop: asyncio.AbstractEventLoop,
    get_client: Callable[[], Optional[PomodoroClient]],
    logger: logging.Logger,
) -> Callable[[str], None]:
    """Forward websocket control actions from the server thread to the timer loop."""

    def handle(action: str) -> None:
        client = get_client()
        if client is None:
            raise RuntimeError("Timer is not running")
        if client.is_detached:
            raise ControllerDetachedError("pomodoro controller is detached")

        send = {
            CONTROL_PAUSE: client.pause,
            CONTROL_RESUME: client.resume,
            CONTROL_ABORT: client.abort,
        }[action]
        future = asyncio.run_coroutine_threadsafe(send(), loop)

        def _log_failure(done) -> None:
            error = done.exception()
            if error is not None:
                logger.warning("Control action %s failed: %s", action, error)

        future.add_done_callback(_log_failure)

    return handle


async def run_pomodoro(
    pomodoro: Pomodoro,
    server_config: EventServerConfig,
    logger: logging.Logger,
) -> int:
    loop = asyncio.get_running_loop()
    client: Optional[PomodoroClient] = None

    event_server: Optional[EventServer] = None
    if server_config.enabled:
        event_server = EventServer(
            server_config,
            control_handler=make_control_handler(loop, lambda: client, logger),
            logger=logging.getLogger("event_server"),
        )
    publisher = RuntimeEventPublisher(event_server)

    def on_event(event: PomodoroEvent) -> None:
        publisher.publish_pomodoro_event(event)

    try:
        if event_server is not None:
            event_server.start()

        client = await start(pomodoro, on_event=on_event)
        setup_signal_handlers(loop, client, logger)

        outcome = await client.wait()
        counter = pomodoro.counter
        logger.info(
            "Pomodoro finished (%s): working=%d short_break=%d long_break=%d",
            outcome,
            counter.working,
            counter.short_break,
            counter.long_break,
        )
        return 0
    except Exception as error:
        logger.error("Unexpected error: %s", error, exc_info=True)
        return 1
    finally:
        if client is not None:
            await client.shutdown()
        if event_server is not None:
            logger.info("Stopping event server...")
            event_server.stop(timeout_seconds=5.0)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the pomodoro timer until it is consumed or aborted."""
    parser = argparse.ArgumentParser(description="Pomodoro work/break cycle timer")
    parser.add_argument("--config", help="Path to config.toml (default: $APP_CONFIG_FILE)")
    parser.add_argument("--verbose", action="store_true", help="Log every tick")
    args = parser.parse_args(argv)

    logger = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        app_config = load_app_config(args.config)
        server_config = EventServerConfig.from_settings(app_config.event_server)
        pomodoro = build_pomodoro(app_config.pomodoro)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    except (PomodoroConfigurationError, ServerConfigurationError) as error:
        logger.error("Configuration error: %s", error)
        return 1
    logger.info("Loaded runtime config: %s", source_description(app_config))

    try:
        return asyncio.run(run_pomodoro(pomodoro, server_config, logger))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by keyboard interrupt.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
