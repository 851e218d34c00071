"""
Pod snapshots consumed by the remediation engine
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


class PodIdentity(NamedTuple):
    """Unique key of a Pod for cooldown tracking"""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ContainerState:
    waiting_reason: Optional[str]
    restart_count: int = 0


@dataclass(frozen=True)
class PodObservation:
    """Immutable snapshot of a Pod taken from an update event"""

    namespace: str
    name: str
    owner_present: bool
    container_statuses: Tuple[ContainerState, ...] = ()

    @property
    def identity(self) -> PodIdentity:
        return PodIdentity(self.namespace, self.name)

    @classmethod
    def from_pod(cls, pod) -> "PodObservation":
        """Build an observation from a kubernetes ``V1Pod``"""
        metadata = pod.metadata
        statuses = []
        for status in (pod.status.container_statuses if pod.status else None) or []:
            waiting = status.state.waiting if status.state else None
            statuses.append(ContainerState(
                waiting_reason=waiting.reason if waiting else None,
                restart_count=status.restart_count or 0,
            ))

        return cls(
            namespace=metadata.namespace,
            name=metadata.name,
            owner_present=bool(metadata.owner_references),
            container_statuses=tuple(statuses),
        )
