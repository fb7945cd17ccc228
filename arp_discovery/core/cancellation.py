"""
Explicit cancellation token used to interrupt a scan session.
"""

import threading
from typing import Callable, List, Optional


class CancellationToken:
    """
    One-shot cancellation flag with callbacks.

    Callbacks registered before ``cancel()`` run synchronously inside it, so
    once ``cancel()`` returns every registered party has been notified.
    Callbacks registered after cancellation run immediately.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or the timeout expires; return the flag."""
        return self._event.wait(timeout)
