"""Lifecycle coordinator for signal-driven shutdown of the exporter."""

import logging
import signal
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LifecycleEvent(str, Enum):
    """Lifecycle events raised during shutdown."""

    PREPARE_SHUTDOWN = "prepare-shutdown"
    SHUTDOWN = "shutdown"
    AFTER_SHUTDOWN = "after-shutdown"


class LifecycleCoordinatorProtocol(ABC):
    """Protocol for lifecycle coordinator implementations."""

    @abstractmethod
    def initialize(self) -> None:
        """Setup the signal handlers."""
        pass

    @abstractmethod
    def register_lifecycle_notification(
        self, callback: Callable[[LifecycleEvent], None]
    ) -> None:
        """Register a callback to be notified of lifecycle events."""
        pass

    @abstractmethod
    def register_shutdown_waiter(
        self, name: str, handler: Callable[[float], bool]
    ) -> None:
        """Register a handler that blocks until ready for shutdown."""
        pass

    @abstractmethod
    def is_shutting_down(self) -> bool:
        """Check if shutdown has been initiated."""
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Implements the shutdown process."""
        pass


class LifecycleCoordinator(LifecycleCoordinatorProtocol):
    """Coordinator for shutting the exporter down on SIGTERM/SIGINT.

    Registered callbacks receive PREPARE_SHUTDOWN, SHUTDOWN and
    AFTER_SHUTDOWN in that order. Waiters run between the first two and
    share the graceful shutdown timeout.
    """

    def __init__(self, graceful_shutdown_timeout: int):
        """Initialize lifecycle coordinator.

        Args:
            graceful_shutdown_timeout: Maximum seconds to wait for shutdown
        """
        self._graceful_shutdown_timeout = graceful_shutdown_timeout
        self._shutting_down = False
        self._lifecycle_lock = threading.RLock()
        self._lifecycle_notifications: list[Callable[[LifecycleEvent], None]] = []
        self._shutdown_waiters: dict[str, Callable[[float], bool]] = {}

        logger.debug("LifecycleCoordinator initialized")

    def initialize(self) -> None:
        """Setup the signal handlers."""
        signal.signal(signal.SIGTERM, self._handle_sigterm)
        signal.signal(signal.SIGINT, self._handle_sigterm)

    def register_lifecycle_notification(
        self, callback: Callable[[LifecycleEvent], None]
    ) -> None:
        with self._lifecycle_lock:
            self._lifecycle_notifications.append(callback)
            logger.debug(
                f"Registered lifecycle notification: "
                f"{getattr(callback, '__name__', repr(callback))}"
            )

    def register_shutdown_waiter(
        self, name: str, handler: Callable[[float], bool]
    ) -> None:
        with self._lifecycle_lock:
            self._shutdown_waiters[name] = handler
            logger.debug(f"Registered shutdown waiter: {name}")

    def is_shutting_down(self) -> bool:
        with self._lifecycle_lock:
            return self._shutting_down

    def _handle_sigterm(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, initiating graceful shutdown")
        self.shutdown()

    def shutdown(self) -> None:
        with self._lifecycle_lock:
            if self._shutting_down:
                logger.warning("Shutdown already in progress, ignoring signal")
                return

            self._shutting_down = True
            self._raise_lifecycle_event(LifecycleEvent.PREPARE_SHUTDOWN)

        start_time = time.perf_counter()
        all_ready = True

        for name, waiter in self._shutdown_waiters.items():
            remaining = self._graceful_shutdown_timeout - (time.perf_counter() - start_time)

            if remaining <= 0:
                logger.error(f"Shutdown timeout exceeded before checking {name}")
                all_ready = False
                break

            try:
                if not waiter(remaining):
                    logger.warning(f"{name} was not ready within timeout")
                    all_ready = False
            except Exception as e:
                logger.error(f"Error in shutdown waiter {name}: {e}")
                all_ready = False

        if not all_ready:
            logger.error(
                f"Shutdown timeout exceeded after "
                f"{time.perf_counter() - start_time:.1f}s, forcing shutdown"
            )

        self._raise_lifecycle_event(LifecycleEvent.SHUTDOWN)

        logger.info("Shutting down")

        self._raise_lifecycle_event(LifecycleEvent.AFTER_SHUTDOWN)

    def _raise_lifecycle_event(self, event: LifecycleEvent) -> None:
        """Notify all registered callbacks of a lifecycle event."""
        logger.debug(f"Raising lifecycle event {event}")

        for callback in self._lifecycle_notifications:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Error in lifecycle event notification "
                    f"{getattr(callback, '__name__', repr(callback))}: {e}"
                )
