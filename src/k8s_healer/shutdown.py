"""
Broadcast-once shutdown signal shared by watchers and the ledger sweeper.

``trigger`` takes no lock of its own, so it can be called from a signal
handler that interrupts the main thread at any point. Callbacks live in a
plain list and are handed out with ``list.pop``, which is atomic, so each one
runs exactly once no matter how trigger and ``add_callback`` interleave.
"""

import threading
from typing import Callable, List, Optional

from .logger import get_logger

logger = get_logger(__name__)


class ShutdownCoordinator:
    def __init__(self):
        self._event = threading.Event()
        self._callbacks: List[Callable[[], None]] = []

    def trigger(self) -> None:
        """Fire the signal. Calling it again, from any thread, does nothing new."""
        self._event.set()
        self._run_callbacks()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once when the signal fires (immediately if it already has)"""
        self._callbacks.append(callback)
        if self._event.is_set():
            self._run_callbacks()

    def _run_callbacks(self) -> None:
        while True:
            try:
                callback = self._callbacks.pop()
            except IndexError:
                return
            try:
                callback()
            except Exception as e:
                logger.error("Shutdown callback failed", error=str(e), exc_info=True)

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until shutdown or ``timeout``; return True if shutdown fired"""
        return self._event.wait(timeout)
