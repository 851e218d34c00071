from k8s_healer.health import DEFAULT_RESTART_THRESHOLD, classify
from k8s_healer.models import ContainerState, PodObservation


def observation(*states, owner_present=True):
    return PodObservation("ns", "api-1", owner_present, tuple(states))


def test_no_containers_is_healthy():
    assert classify(observation()).healthy


def test_other_waiting_reasons_are_healthy():
    for reason in (None, "", "ImagePullBackOff", "ContainerCreating", "crashloopbackoff"):
        verdict = classify(observation(ContainerState(reason, 50)))
        assert verdict.healthy, reason
        assert verdict.reason is None


def test_crashloop_below_threshold_is_healthy():
    assert classify(observation(ContainerState("CrashLoopBackOff", 2))).healthy


def test_crashloop_at_threshold_is_unhealthy():
    verdict = classify(observation(ContainerState("CrashLoopBackOff", DEFAULT_RESTART_THRESHOLD)))
    assert not verdict.healthy
    assert verdict.reason == "Persistent CrashLoopBackOff (Restarts: 3)"


def test_first_qualifying_container_sets_reason():
    verdict = classify(observation(
        ContainerState("CrashLoopBackOff", 1),
        ContainerState("CrashLoopBackOff", 7),
        ContainerState("CrashLoopBackOff", 9),
    ))
    assert not verdict.healthy
    assert "Restarts: 7" in verdict.reason


def test_custom_threshold():
    obs = observation(ContainerState("CrashLoopBackOff", 4))
    assert classify(obs, restart_threshold=5).healthy
    assert not classify(obs, restart_threshold=1).healthy


def test_owner_does_not_affect_classification():
    verdict = classify(observation(ContainerState("CrashLoopBackOff", 10), owner_present=False))
    assert not verdict.healthy
