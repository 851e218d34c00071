import threading
import time
from dataclasses import asdict
from typing import Callable, List, Optional

from .config import EngineConfig
from .health import classify
from .kubernetes_client import KubernetesClient
from .ledger import CooldownLedger
from .logger import HealerLogger
from .models import PodObservation
from .notifications import NotificationManager
from .shutdown import ShutdownCoordinator
from .watcher import NamespaceWatcher, start_watchers


class RemediationEngine:
    """Watches the configured namespaces and deletes persistently unhealthy Pods"""

    def __init__(self, config: EngineConfig, namespaces: List[str],
                 k8s_client: KubernetesClient,
                 notification_manager: Optional[NotificationManager] = None,
                 clock: Callable[[], float] = time.time):
        self.config = config
        self.namespaces = tuple(namespaces)
        self.k8s_client = k8s_client
        self.notification_manager = notification_manager or NotificationManager()
        self.clock = clock
        self.ledger = CooldownLedger(config.cooldown_window, clock=clock)
        self.shutdown = ShutdownCoordinator()
        self.watchers: List[NamespaceWatcher] = []
        self.log = HealerLogger()

    def on_pod_updated(self, observation: PodObservation) -> None:
        """Classify an updated Pod and heal it if needed. Called from watcher threads."""
        # Unmanaged pods are never deleted
        if not observation.owner_present:
            return

        verdict = classify(observation, self.config.restart_threshold)
        if verdict.healthy:
            return

        identity = observation.identity
        skip, remaining = self.ledger.check_and_mark(identity, self.clock())
        if skip:
            if remaining > 0:
                self.log.log_heal_skipped(str(identity), remaining)
            else:
                self.log.log_heal_in_progress(str(identity))
            return

        recorded = False
        try:
            self.log.log_heal_required(str(identity), verdict.reason)
            result = self.k8s_client.delete_pod(
                name=identity.name,
                namespace=identity.namespace,
                timeout=self.config.delete_timeout
            )
            if result.succeeded:
                self.ledger.record(identity, self.clock())
                recorded = True
                self.log.log_pod_healed(str(identity), verdict.reason, result.outcome.value)
            else:
                self.log.log_delete_failed(str(identity), result.error)
                self.notification_manager.notify_delete_failure(identity, verdict.reason, result.error)
        finally:
            if not recorded:
                self.ledger.release(identity)

    def run(self) -> None:
        """Start all watchers and the sweeper, then block until shutdown"""
        self.log.log_startup({
            **asdict(self.config),
            "namespaces": list(self.namespaces) or ["<all namespaces>"],
        })

        sweeper = threading.Thread(
            target=self.ledger.run_sweeper,
            args=(self.shutdown, self.config.sweep_interval),
            name="cooldown-sweeper",
            daemon=True
        )
        sweeper.start()

        self.watchers = start_watchers(
            list(self.namespaces), self.k8s_client, self.on_pod_updated,
            self.shutdown, self.config.resync_period, self.log
        )

        self.shutdown.wait()
        self.log.log_shutdown(self.config.shutdown_grace)

        # Let in-flight watcher threads unwind
        deadline = time.monotonic() + self.config.shutdown_grace
        for w in self.watchers:
            w.join(max(0.0, deadline - time.monotonic()))
        sweeper.join(max(0.0, deadline - time.monotonic()))

    def trigger_shutdown(self) -> None:
        """Stop the engine; safe to call repeatedly and from any thread"""
        self.shutdown.trigger()
