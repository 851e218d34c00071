"""
Per-namespace Pod watch loop.

Each NamespaceWatcher runs list-then-watch in its own thread. The initial
list must succeed before the watcher reports ready; if it fails, only this
watcher stops. Every watch stream is opened with ``timeout_seconds`` equal to
the resync period, and when it closes the namespace is re-listed and every
Pod is delivered again, so missed events are healed within one period.
"""

import random
import threading
from typing import Callable, List, Optional

from kubernetes import watch
from kubernetes.client.exceptions import ApiException

from .kubernetes_client import ALL_NAMESPACES, KubernetesClient
from .logger import HealerLogger, get_logger
from .models import PodObservation
from .shutdown import ShutdownCoordinator

logger = get_logger(__name__)

# Cap for the backoff between failed watch attempts
MAX_BACKOFF_SECONDS = 30


class NamespaceWatcher:
    def __init__(self, namespace: str, k8s_client: KubernetesClient,
                 on_pod_updated: Callable[[PodObservation], None],
                 shutdown: ShutdownCoordinator, resync_period: float = 30.0,
                 healer_logger: Optional[HealerLogger] = None):
        self.namespace = namespace
        self.k8s_client = k8s_client
        self.on_pod_updated = on_pod_updated
        self.shutdown = shutdown
        self.resync_period = resync_period
        self.log = healer_logger or HealerLogger()

        self.ready = threading.Event()
        self.failed = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._active_watch: Optional[watch.Watch] = None
        self._watch_lock = threading.Lock()

        shutdown.add_callback(self._interrupt)

    @property
    def display_name(self) -> str:
        return self.namespace if self.namespace != ALL_NAMESPACES else "<all namespaces>"

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self.run,
            name=f"watch-{self.display_name}",
            daemon=True
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _interrupt(self) -> None:
        with self._watch_lock:
            active = self._active_watch
        if active is not None:
            active.stop()

    def run(self) -> None:
        try:
            _, resource_version = self.k8s_client.list_pods(self.namespace)
        except Exception as e:
            self.log.log_sync_failed(self.display_name, e)
            self.failed.set()
            return

        self.ready.set()
        self.log.log_namespace_synced(self.display_name)

        backoff = 1
        while not self.shutdown.is_set():
            try:
                resource_version = self._watch(resource_version)
                if self.shutdown.is_set():
                    break
                resource_version = self._resync()
                backoff = 1
            except ApiException as e:
                if e.status == 410:
                    logger.info("Watch resource version expired, re-listing",
                                namespace=self.display_name)
                    resource_version = None
                    continue
                if e.status in (401, 403):
                    logger.error("Kubernetes API watch denied, check RBAC permissions",
                                 namespace=self.display_name, status=e.status)
                    self.failed.set()
                    return
                logger.error("Kubernetes API watch error", namespace=self.display_name,
                             status=e.status, error=e.reason)
                backoff = self._backoff(backoff)
            except Exception as e:
                logger.error("Unexpected watch error", namespace=self.display_name,
                             error=str(e), exc_info=True)
                backoff = self._backoff(backoff)

        logger.info("Stopped watching namespace", namespace=self.display_name)

    def _backoff(self, seconds: int) -> int:
        self.shutdown.wait(seconds * (0.5 + random.random()))
        return min(seconds * 2, MAX_BACKOFF_SECONDS)

    def _watch(self, resource_version: Optional[str]) -> Optional[str]:
        """Stream Pod events until the server closes the watch; return the last resourceVersion"""
        if resource_version is None or self.shutdown.is_set():
            return resource_version

        watcher = watch.Watch()
        with self._watch_lock:
            self._active_watch = watcher

        func, kwargs = self.k8s_client.pod_list_call(self.namespace)
        try:
            for event in watcher.stream(
                func,
                resource_version=resource_version,
                timeout_seconds=max(1, int(self.resync_period)),
                _request_timeout=self.resync_period + 5,
                **kwargs
            ):
                pod = event.get("object")
                if pod is None or not hasattr(pod, "metadata"):
                    continue
                if pod.metadata.resource_version:
                    resource_version = pod.metadata.resource_version
                if event.get("type") == "MODIFIED":
                    self._deliver(pod)
                if self.shutdown.is_set():
                    break
        finally:
            watcher.stop()
            with self._watch_lock:
                if self._active_watch is watcher:
                    self._active_watch = None

        return resource_version

    def _resync(self) -> Optional[str]:
        """Re-list the namespace and deliver every Pod again"""
        pods, resource_version = self.k8s_client.list_pods(self.namespace)
        for pod in pods:
            if self.shutdown.is_set():
                break
            self._deliver(pod)
        return resource_version

    def _deliver(self, pod) -> None:
        try:
            self.on_pod_updated(PodObservation.from_pod(pod))
        except Exception as e:
            self.log.log_error(e, context=f"pod update {pod.metadata.namespace}/{pod.metadata.name}")


def start_watchers(namespaces: List[str], k8s_client: KubernetesClient,
                   on_pod_updated: Callable[[PodObservation], None],
                   shutdown: ShutdownCoordinator, resync_period: float,
                   healer_logger: Optional[HealerLogger] = None) -> List[NamespaceWatcher]:
    """Start one watcher per namespace; an empty list watches all namespaces"""
    watchers = [
        NamespaceWatcher(ns, k8s_client, on_pod_updated, shutdown, resync_period, healer_logger)
        for ns in (namespaces or [ALL_NAMESPACES])
    ]
    for w in watchers:
        w.start()
    return watchers
