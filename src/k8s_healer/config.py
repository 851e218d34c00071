"""
Configuration management for K8s Healer
"""

import os
import re
from dataclasses import dataclass
from typing import Optional, Union

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ConfigurationError(Exception):
    """Raised when the healer cannot be configured or cannot reach the cluster"""


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse a duration such as ``10m``, ``30s``, ``1h30m`` or ``500ms`` into seconds.

    Bare numbers are taken as seconds.
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    if not text:
        raise ConfigurationError("Empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ConfigurationError(f"Invalid duration: {value!r}")
    return total


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


@dataclass
class Config:
    """Environment-level configuration for K8s Healer"""

    # Kubernetes configuration
    kube_config_path: Optional[str] = None

    # Comma-separated namespaces, may contain wildcards; empty watches all
    namespaces: str = ""

    # Remediation policy
    heal_cooldown: str = "10m"
    restart_threshold: int = 3

    # Timing
    resync_period: str = "30s"
    delete_timeout: str = "10s"
    sweep_interval: str = "30m"
    shutdown_grace: str = "1s"

    # Execution control
    dry_run: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # Notifications
    pushgateway_url: Optional[str] = None
    prometheus_job_name: str = "k8s_healer"
    cluster_name: str = "Unknown"

    def __post_init__(self):
        """Override defaults with environment variables if present"""
        self.kube_config_path = os.getenv("KUBECONFIG", self.kube_config_path)
        self.namespaces = os.getenv("NAMESPACES", self.namespaces)
        self.heal_cooldown = os.getenv("HEAL_COOLDOWN", self.heal_cooldown)
        self.restart_threshold = int(os.getenv("RESTART_THRESHOLD", self.restart_threshold))
        self.resync_period = os.getenv("RESYNC_PERIOD", self.resync_period)
        self.delete_timeout = os.getenv("DELETE_TIMEOUT", self.delete_timeout)
        self.sweep_interval = os.getenv("SWEEP_INTERVAL", self.sweep_interval)
        self.shutdown_grace = os.getenv("SHUTDOWN_GRACE", self.shutdown_grace)
        self.dry_run = _env_flag("DRY_RUN", self.dry_run)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.log_format = os.getenv("LOG_FORMAT", self.log_format)
        self.pushgateway_url = os.getenv("PROMETHEUS_PUSHGATEWAY_URL", self.pushgateway_url)
        self.prometheus_job_name = os.getenv("PROMETHEUS_JOB_NAME", self.prometheus_job_name)
        self.cluster_name = os.getenv("CLUSTER_NAME", self.cluster_name)


@dataclass(frozen=True)
class EngineConfig:
    """Immutable remediation engine settings. All durations are in seconds."""

    cooldown_window: float = 600.0
    restart_threshold: int = 3
    resync_period: float = 30.0
    delete_timeout: float = 10.0
    sweep_interval: float = 1800.0
    shutdown_grace: float = 1.0

    def __post_init__(self):
        if self.restart_threshold < 1:
            raise ConfigurationError(
                f"restart_threshold must be at least 1, got {self.restart_threshold}"
            )
        for name in ("cooldown_window", "resync_period", "delete_timeout", "sweep_interval"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.shutdown_grace < 0:
            raise ConfigurationError(f"shutdown_grace must not be negative, got {self.shutdown_grace}")
