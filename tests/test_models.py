from unittest.mock import Mock

from conftest import make_pod

from k8s_healer.models import ContainerState, PodIdentity, PodObservation


def test_from_pod_copies_container_state():
    obs = PodObservation.from_pod(make_pod(namespace="ns", name="api-1", restart_count=4))

    assert obs.identity == PodIdentity("ns", "api-1")
    assert str(obs.identity) == "ns/api-1"
    assert obs.owner_present
    assert obs.container_statuses == (ContainerState("CrashLoopBackOff", 4),)


def test_from_pod_without_owner_or_waiting_state():
    obs = PodObservation.from_pod(make_pod(waiting_reason=None, owned=False))

    assert not obs.owner_present
    assert obs.container_statuses[0].waiting_reason is None


def test_from_pod_without_container_statuses():
    pod = make_pod()
    pod.status.container_statuses = None
    pod.metadata.owner_references = None

    obs = PodObservation.from_pod(pod)

    assert obs.container_statuses == ()
    assert not obs.owner_present


def test_from_pod_missing_restart_count():
    pod = make_pod()
    pod.status.container_statuses[0].restart_count = None
    assert PodObservation.from_pod(pod).container_statuses[0].restart_count == 0


def test_identity_is_structural():
    assert PodIdentity("a", "b") == PodIdentity("a", "b")
    assert len({PodIdentity("a", "b"), PodIdentity("a", "b"), PodIdentity("b", "a")}) == 2
