"""
Cooldown bookkeeping for remediated Pods.

Every public method takes the same lock, so the ledger can be shared by all
namespace watchers and the sweeper thread. ``check_and_mark`` is the atomic
check-and-set the engine relies on: the first caller for an identity reserves
it, and every other caller is told to skip until the reservation is either
turned into a cooldown entry by ``record`` or dropped by ``release``.
"""

import threading
import time
from typing import Callable, Dict, Optional, Set, Tuple

from .logger import get_logger
from .models import PodIdentity
from .shutdown import ShutdownCoordinator

logger = get_logger(__name__)

# Housekeeping cadence of the sweeper thread
DEFAULT_SWEEP_INTERVAL = 30 * 60


class CooldownLedger:
    def __init__(self, cooldown_window: float, clock: Callable[[], float] = time.time):
        self.cooldown_window = cooldown_window
        self._clock = clock
        self._lock = threading.Lock()
        self._healed_at: Dict[PodIdentity, float] = {}
        self._in_flight: Set[PodIdentity] = set()

    def _skip_locked(self, identity: PodIdentity, now: float) -> Tuple[bool, float]:
        if identity in self._in_flight:
            return True, 0.0

        last_healed = self._healed_at.get(identity)
        if last_healed is not None:
            elapsed = now - last_healed
            if elapsed < self.cooldown_window:
                return True, self.cooldown_window - elapsed
        return False, 0.0

    def should_skip(self, identity: PodIdentity, now: Optional[float] = None) -> Tuple[bool, float]:
        """Return whether ``identity`` is still cooling down and how many seconds remain.

        A Pod whose delete is still in flight is skipped with 0 seconds remaining,
        since its cooldown has not started yet.
        """
        now = self._clock() if now is None else now
        with self._lock:
            return self._skip_locked(identity, now)

    def check_and_mark(self, identity: PodIdentity, now: Optional[float] = None) -> Tuple[bool, float]:
        """Like ``should_skip``, but reserve ``identity`` when it is not skipped.

        The caller that gets ``(False, 0.0)`` owns the reservation and must
        follow up with ``record`` or ``release``.
        """
        now = self._clock() if now is None else now
        with self._lock:
            skip, remaining = self._skip_locked(identity, now)
            if not skip:
                self._in_flight.add(identity)
            return skip, remaining

    def record(self, identity: PodIdentity, now: Optional[float] = None) -> None:
        """Start (or restart) the cooldown of ``identity`` at ``now``"""
        now = self._clock() if now is None else now
        with self._lock:
            self._healed_at[identity] = now
            self._in_flight.discard(identity)

    def release(self, identity: PodIdentity) -> None:
        """Drop a reservation without starting a cooldown"""
        with self._lock:
            self._in_flight.discard(identity)

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove entries older than twice the cooldown window; return how many went"""
        now = self._clock() if now is None else now
        max_age = 2 * self.cooldown_window
        with self._lock:
            expired = [
                identity for identity, healed_at in self._healed_at.items()
                if now - healed_at > max_age
            ]
            for identity in expired:
                del self._healed_at[identity]

        if expired:
            logger.debug("Swept expired cooldown entries", removed=len(expired))
        return len(expired)

    def last_healed_at(self, identity: PodIdentity) -> Optional[float]:
        with self._lock:
            return self._healed_at.get(identity)

    def __len__(self) -> int:
        with self._lock:
            return len(self._healed_at)

    def __contains__(self, identity: PodIdentity) -> bool:
        with self._lock:
            return identity in self._healed_at

    def run_sweeper(self, shutdown: ShutdownCoordinator,
                    interval: float = DEFAULT_SWEEP_INTERVAL) -> None:
        """Sweep every ``interval`` seconds until shutdown"""
        while not shutdown.wait(interval):
            self.sweep()
        logger.debug("Cooldown sweeper stopped")
