import time
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import requests

from k8s_healer.models import PodIdentity
from k8s_healer.notifications import NotificationManager

POD = PodIdentity("default", "web-app-pod")
REASON = "Persistent CrashLoopBackOff (Restarts: 4)"


@pytest.fixture
def mock_put():
    with patch("k8s_healer.notifications.requests.put") as put:
        yield put


def test_pushes_failure_metrics(mock_put):
    manager = NotificationManager("http://localhost:9091/", job_name="healer_test",
                                  cluster_name="minikube")

    assert manager.notify_delete_failure(POD, REASON, "500 Internal Server Error")

    url = mock_put.call_args[0][0]
    body = mock_put.call_args[1]["data"]
    assert url == "http://localhost:9091/metrics/job/healer_test"
    assert 'namespace="default",pod="web-app-pod",cluster="minikube"' in body
    assert "k8s_healer_delete_failure" in body
    mock_put.return_value.raise_for_status.assert_called_once()


def test_notifications_for_same_pod_are_rate_limited(mock_put):
    manager = NotificationManager("http://localhost:9091")

    assert manager.notify_delete_failure(POD, REASON, "timeout")
    assert not manager.notify_delete_failure(POD, REASON, "timeout")
    assert manager.notify_delete_failure(PodIdentity("production", "database-pod"), REASON, "timeout")
    assert mock_put.call_count == 2


def test_cooldown_expiry_allows_new_notification(mock_put):
    manager = NotificationManager("http://localhost:9091", cooldown=timedelta(0))

    manager.notify_delete_failure(POD, REASON, "timeout")
    manager.notify_delete_failure(POD, REASON, "timeout")

    assert mock_put.call_count == 2


def test_pushgateway_failure_falls_back_to_log(mock_put):
    mock_put.side_effect = requests.ConnectionError("refused")
    manager = NotificationManager("http://localhost:9091")

    assert manager.notify_delete_failure(POD, REASON, "timeout")


def test_without_pushgateway_only_logs(mock_put):
    manager = NotificationManager()

    assert manager.notify_delete_failure(POD, REASON, "timeout")
    mock_put.assert_not_called()


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="requires time.tzset")
def test_failure_timestamp_is_epoch_seconds_outside_utc(mock_put, monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    try:
        manager = NotificationManager("http://localhost:9091")
        manager.notify_delete_failure(POD, REASON, "timeout")
    finally:
        monkeypatch.undo()
        time.tzset()

    body = mock_put.call_args[1]["data"]
    line = next(l for l in body.splitlines() if l.startswith("k8s_healer_last_failure_timestamp{"))
    pushed = float(line.rsplit(" ", 1)[1])
    assert abs(pushed - time.time()) < 60


def test_expired_notification_entries_are_pruned(mock_put):
    manager = NotificationManager("http://localhost:9091", cooldown=timedelta(minutes=30))
    stale = datetime.now(timezone.utc) - timedelta(hours=1)
    for i in range(5):
        manager.sent_notifications[PodIdentity("default", f"web-{i}")] = stale

    manager.notify_delete_failure(POD, REASON, "timeout")

    assert list(manager.sent_notifications) == [POD]
