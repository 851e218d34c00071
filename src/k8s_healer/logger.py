"""
Logging configuration for K8s Healer
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from colorama import init as colorama_init

# Initialize colorama for cross-platform colored output
colorama_init()


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Setup structured logging for the application"""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    # Suppress verbose kubernetes client logs
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


class HealerLogger:
    """Specialized logger for remediation events"""

    def __init__(self):
        self.logger = get_logger("k8s-healer")

    def log_startup(self, config_dict: Dict[str, Any]) -> None:
        """Log engine startup"""
        self.logger.info(
            "K8s Healer starting up",
            version="1.0.0",
            config=config_dict
        )

    def log_namespace_synced(self, namespace: str) -> None:
        self.logger.info(
            "Successfully synced cache and started watching namespace",
            namespace=namespace
        )

    def log_sync_failed(self, namespace: str, error: Exception) -> None:
        self.logger.error(
            "Error syncing cache for namespace, exiting watch",
            namespace=namespace,
            error=str(error),
            error_type=type(error).__name__
        )

    def log_heal_required(self, pod: str, reason: str) -> None:
        """Log that a pod has been judged persistently unhealthy"""
        self.logger.warning(
            "Healing action required",
            pod=pod,
            reason=reason
        )

    def log_pod_healed(self, pod: str, reason: str, outcome: str) -> None:
        self.logger.info(
            "Pod healed, controller is expected to recreate it",
            pod=pod,
            reason=reason,
            outcome=outcome
        )

    def log_heal_skipped(self, pod: str, remaining_seconds: float) -> None:
        """Log when a pod is skipped because it is in cooldown"""
        self.logger.info(
            "Pod recently healed, skipping re-heal",
            pod=pod,
            remaining_seconds=round(remaining_seconds, 1)
        )

    def log_heal_in_progress(self, pod: str) -> None:
        self.logger.info(
            "Pod heal already in progress, skipping",
            pod=pod
        )

    def log_delete_failed(self, pod: str, error: Optional[str]) -> None:
        self.logger.error(
            "Failed to delete pod",
            pod=pod,
            error=error
        )

    def log_shutdown(self, grace_seconds: float) -> None:
        self.logger.info(
            "Termination signal received, shutting down healer",
            grace_seconds=grace_seconds
        )

    def log_error(self, error: Exception, context: str = None) -> None:
        """Log errors with context"""
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context,
            exc_info=True
        )
