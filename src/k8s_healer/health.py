"""
Pod health classification
"""

from typing import NamedTuple, Optional

from .models import PodObservation

# Number of restarts a container needs before the Pod counts as persistently unhealthy
DEFAULT_RESTART_THRESHOLD = 3

CRASH_LOOP_BACK_OFF = "CrashLoopBackOff"


class HealthVerdict(NamedTuple):
    healthy: bool
    reason: Optional[str] = None


HEALTHY = HealthVerdict(True)


def classify(observation: PodObservation,
             restart_threshold: int = DEFAULT_RESTART_THRESHOLD) -> HealthVerdict:
    """Decide whether a Pod is persistently unhealthy.

    The first container stuck in CrashLoopBackOff with at least
    ``restart_threshold`` restarts makes the Pod unhealthy and supplies the reason.
    """
    for status in observation.container_statuses:
        if status.waiting_reason == CRASH_LOOP_BACK_OFF and status.restart_count >= restart_threshold:
            return HealthVerdict(
                False,
                f"Persistent CrashLoopBackOff (Restarts: {status.restart_count})"
            )
    return HEALTHY
