"""
Base class for the background workers of a scan session.

The transmitter and the listener each run on their own thread. This module
defines the lifecycle they share: start, cooperative stop, bounded join, and
capture of the fatal error that ended the thread, if any.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..utils.logger import Logger


class BaseWorker(ABC):
    """
    Abstract base class for session workers.

    Subclasses implement ``_run``, which must return promptly once
    ``_stop_event`` is set.
    """

    worker_name = "worker"

    def __init__(self, logger: Optional[Logger] = None,
                 on_finished: Optional[Callable[[], None]] = None):
        """
        Initialize the worker.

        Args:
            logger: Logger instance for progress and errors
            on_finished: Called from the worker thread when ``_run`` returns
        """
        self.logger = logger
        self.on_finished = on_finished
        self.error: Optional[BaseException] = None
        self._stop_event = threading.Event()
        self._done_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def _run(self, *args) -> None:
        """Body of the worker thread."""

    def start(self, *args) -> None:
        """Start the worker thread."""
        if self._thread is not None:
            raise RuntimeError(f"{self.worker_name} already started")
        self._thread = threading.Thread(
            target=self._main, args=args, name=f"arp-{self.worker_name}", daemon=True
        )
        self._thread.start()

    def _main(self, *args) -> None:
        try:
            self._run(*args)
        except Exception as e:
            self.error = e
            self._log_error(f"{self.worker_name} stopped on error: {e}")
        finally:
            self._done_event.set()
            if self.on_finished:
                self.on_finished()

    def stop(self) -> None:
        """Ask the worker to finish."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the worker thread.

        Returns:
            True if the thread has finished
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def done(self) -> bool:
        return self._done_event.is_set()

    def _log_error(self, message: str) -> None:
        """Log an error message if logger is available."""
        if self.logger:
            self.logger.error(message)

    def _log_debug(self, message: str) -> None:
        """Log a debug message if logger is available."""
        if self.logger:
            self.logger.debug(message)
