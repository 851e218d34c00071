"""
Notifications for failed remediation attempts - Prometheus Pushgateway or log
"""

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import requests

from .logger import get_logger
from .models import PodIdentity

logger = get_logger(__name__)


class NotificationManager:
    def __init__(self, pushgateway_url: Optional[str] = None,
                 job_name: str = "k8s_healer", cluster_name: str = "Unknown",
                 cooldown: timedelta = timedelta(minutes=30)):
        self.pushgateway_url = pushgateway_url.rstrip("/") if pushgateway_url else None
        self.job_name = job_name
        self.cluster_name = cluster_name
        self.notification_cooldown = cooldown
        self.sent_notifications: Dict[PodIdentity, datetime] = {}
        self._lock = threading.Lock()

    def notify_delete_failure(self, identity: PodIdentity, reason: str,
                              error_details: Optional[str]) -> bool:
        """Report a failed delete; returns False when the pod is in notification cooldown"""
        now = datetime.now(timezone.utc)
        with self._lock:
            self._prune(now)
            last_notification = self.sent_notifications.get(identity)
            if last_notification and now - last_notification < self.notification_cooldown:
                logger.debug("Notification in cooldown", pod=str(identity))
                return False
            self.sent_notifications[identity] = now

        if self.pushgateway_url:
            try:
                self._push_to_pushgateway(identity, reason)
                logger.info("Prometheus alert sent", pod=str(identity))
                return True
            except requests.RequestException as e:
                logger.error("Failed to push to Pushgateway", error=str(e))

        return self._send_log_notification(identity, reason, error_details)

    def _prune(self, now: datetime) -> None:
        expired = [
            identity for identity, sent_at in self.sent_notifications.items()
            if now - sent_at >= self.notification_cooldown
        ]
        for identity in expired:
            del self.sent_notifications[identity]

    def _send_log_notification(self, identity: PodIdentity, reason: str,
                               error_details: Optional[str]) -> bool:
        """Log-based notification (fallback)"""
        logger.error(
            "POD HEAL FAILED",
            pod=str(identity),
            reason=reason,
            error=error_details,
            timestamp=datetime.now(timezone.utc).isoformat()
        )
        return True

    def _push_to_pushgateway(self, identity: PodIdentity, reason: str) -> None:
        """Push failure gauges to Prometheus Pushgateway"""
        labels = (
            f'namespace="{identity.namespace}",pod="{identity.name}",'
            f'cluster="{self.cluster_name}"'
        )
        metrics_data = f"""# HELP k8s_healer_delete_failure Pod heal (delete) failure event
# TYPE k8s_healer_delete_failure gauge
k8s_healer_delete_failure{{{labels},reason="{reason}"}} 1

# HELP k8s_healer_last_failure_timestamp Timestamp of last heal failure
# TYPE k8s_healer_last_failure_timestamp gauge
k8s_healer_last_failure_timestamp{{{labels}}} {time.time()}
"""
        url = f"{self.pushgateway_url}/metrics/job/{self.job_name}"
        response = requests.put(url, data=metrics_data, timeout=10)
        response.raise_for_status()
