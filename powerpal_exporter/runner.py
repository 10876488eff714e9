"""Exporter runner with graceful shutdown support."""

import logging
import threading

from paste.translogger import TransLogger  # type: ignore[import-untyped]
from waitress import create_server

from powerpal_exporter import __version__, create_app
from powerpal_exporter.config import Settings
from powerpal_exporter.utils.lifecycle_coordinator import LifecycleEvent

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def run(settings: Settings) -> int:
    """Run the exporter until a termination signal arrives.

    This handles:
    - Logging setup
    - App creation via create_app(), which starts the poller
    - Binding the waitress listener
    - Graceful shutdown coordination

    Returns:
        Process exit code: 0 after a signal-driven shutdown, 1 if the
        HTTP listener could not be started.
    """
    configure_logging(settings.log_level)

    logger.info(f"Starting powerpal_exporter version {__version__}")

    app = create_app(settings)

    lifecycle_coordinator = app.container.lifecycle_coordinator()
    lifecycle_coordinator.initialize()

    wsgi = TransLogger(app, setup_console_handler=False) if settings.access_log else app

    try:
        server = create_server(
            wsgi,
            host=settings.listen_host,
            port=settings.listen_port,
            threads=settings.waitress_threads,
        )
    except OSError as e:
        logger.error(f"Error starting HTTP server on {settings.listen_address}: {e}")
        return 1

    logger.info(
        f"Listening on {settings.listen_host}:{settings.listen_port} "
        f"with {settings.waitress_threads} threads"
    )

    event = threading.Event()

    def signal_shutdown(lifecycle_event: LifecycleEvent) -> None:
        if lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
            event.set()

    lifecycle_coordinator.register_lifecycle_notification(signal_shutdown)

    # Run server in daemon thread so the lifecycle coordinator controls exit
    thread = threading.Thread(target=server.run, daemon=True, name="WaitressServer")
    thread.start()

    event.wait()
    server.close()

    return 0
