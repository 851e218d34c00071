import os
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from .config import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Namespace value that scopes list and watch calls to the whole cluster
ALL_NAMESPACES = ""


class DeleteOutcome(Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class DeleteResult(NamedTuple):
    outcome: DeleteOutcome
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not DeleteOutcome.FAILED


def _load_kube_config(kube_config_path: Optional[str]) -> None:
    if kube_config_path:
        if not os.path.exists(kube_config_path):
            raise ConfigurationError(f"Kubeconfig not found: {kube_config_path}")
        logger.info("Loading kubeconfig from explicit path", path=kube_config_path)
        config.load_kube_config(config_file=kube_config_path)
        return

    try:
        # Method 1: in-cluster config (when running in Kubernetes)
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
        return
    except ConfigException:
        pass

    try:
        # Method 2: default kubeconfig location
        config.load_kube_config()
        logger.info("Loaded kubeconfig from default location")
        return
    except ConfigException:
        pass

    # Method 3: common kubeconfig paths
    possible_paths = [
        os.path.expanduser("~/.kube/config"),
        "/etc/kubernetes/admin.conf",
        "/etc/rancher/k3s/k3s.yaml"
    ]
    for kube_path in possible_paths:
        if os.path.exists(kube_path):
            logger.info("Loading kubeconfig", path=kube_path)
            config.load_kube_config(config_file=kube_path)
            return

    raise ConfigurationError(
        "Could not load Kubernetes configuration. "
        "Please ensure you have:\n"
        "1. A running Kubernetes cluster\n"
        "2. kubectl configured properly\n"
        "3. Or pass --kubeconfig / set KUBECONFIG"
    )


class KubernetesClient:
    def __init__(self, kube_config_path: Optional[str] = None, dry_run: bool = False,
                 core_api: Optional[client.CoreV1Api] = None):
        self.dry_run = dry_run

        if core_api is not None:
            self.v1 = core_api
            return

        try:
            _load_kube_config(kube_config_path)
        except ConfigException as e:
            raise ConfigurationError(f"Failed to build Kubernetes config: {e}") from e

        self.v1 = client.CoreV1Api()

        # Test the connection
        try:
            self.v1.get_api_resources()
        except Exception as e:
            raise ConfigurationError(f"Kubernetes API server unreachable: {e}") from e

        logger.info("Kubernetes client initialized successfully", dry_run=dry_run)

    def list_namespaces(self) -> List[str]:
        """List the names of all namespaces in the cluster"""
        namespaces = self.v1.list_namespace(watch=False)
        return [ns.metadata.name for ns in namespaces.items]

    def pod_list_call(self, namespace: str) -> Tuple[Callable[..., Any], Dict[str, Any]]:
        """Return the list function and arguments scoped to ``namespace``, for list and watch"""
        if namespace == ALL_NAMESPACES:
            return self.v1.list_pod_for_all_namespaces, {}
        return self.v1.list_namespaced_pod, {"namespace": namespace}

    def list_pods(self, namespace: str) -> Tuple[list, Optional[str]]:
        """List the pods in ``namespace`` along with the list's resourceVersion"""
        func, kwargs = self.pod_list_call(namespace)
        pods = func(watch=False, **kwargs)
        resource_version = pods.metadata.resource_version if pods.metadata else None
        return pods.items, resource_version

    def delete_pod(self, name: str, namespace: str, timeout: float = 10.0) -> DeleteResult:
        """Delete a pod, bounded by ``timeout`` seconds. A missing pod counts as deleted."""
        if self.dry_run:
            logger.warning("Dry run - would delete pod", pod=f"{namespace}/{name}")
            return DeleteResult(DeleteOutcome.DELETED)

        try:
            self.v1.delete_namespaced_pod(
                name=name,
                namespace=namespace,
                body=client.V1DeleteOptions(),
                _request_timeout=timeout
            )
        except ApiException as e:
            if e.status == 404:
                logger.info("Pod already gone", pod=f"{namespace}/{name}")
                return DeleteResult(DeleteOutcome.NOT_FOUND)
            logger.error("Failed to delete pod", pod=f"{namespace}/{name}",
                         status=e.status, error=e.reason)
            return DeleteResult(DeleteOutcome.FAILED, f"{e.status} {e.reason}")
        except Exception as e:
            logger.error("Failed to delete pod", pod=f"{namespace}/{name}", error=str(e))
            return DeleteResult(DeleteOutcome.FAILED, str(e))

        logger.info("Successfully deleted pod", pod=f"{namespace}/{name}")
        return DeleteResult(DeleteOutcome.DELETED)
