import threading
from unittest.mock import Mock

import pytest

from k8s_healer.kubernetes_client import DeleteOutcome, DeleteResult


def make_pod(namespace="ns", name="api-1", waiting_reason="CrashLoopBackOff",
             restart_count=4, owned=True, resource_version="100"):
    """Build a Mock shaped like a kubernetes V1Pod"""
    pod = Mock()
    pod.metadata.namespace = namespace
    pod.metadata.name = name
    pod.metadata.resource_version = resource_version
    pod.metadata.owner_references = [Mock(kind="ReplicaSet")] if owned else []

    status = Mock()
    status.restart_count = restart_count
    if waiting_reason is None:
        status.state.waiting = None
    else:
        status.state.waiting.reason = waiting_reason
    pod.status.container_statuses = [status]
    return pod


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeK8sClient:
    """Stands in for KubernetesClient; records every delete"""

    def __init__(self, outcome=DeleteOutcome.DELETED, error=None):
        self.result = DeleteResult(outcome, error)
        self.deleted = []
        self.lock = threading.Lock()
        self.pods = {}
        self.list_error = None
        self.list_calls = 0

    def delete_pod(self, name, namespace, timeout=10.0):
        with self.lock:
            self.deleted.append((namespace, name, timeout))
        return self.result

    def list_pods(self, namespace):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.pods.get(namespace, [])), "100"

    def pod_list_call(self, namespace):
        return Mock(name=f"list_pods_{namespace}"), {"namespace": namespace}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def k8s_client():
    return FakeK8sClient()
