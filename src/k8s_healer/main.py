#!/usr/bin/env python3
"""
K8s Healer - Main Application
"""

import argparse
import signal
import sys
from typing import List, Optional

from .config import Config, ConfigurationError, EngineConfig, parse_duration
from .healer import RemediationEngine
from .kubernetes_client import KubernetesClient
from .logger import get_logger, setup_logging
from .namespaces import resolve_namespaces
from .notifications import NotificationManager

DESCRIPTION = """\
k8s-healer monitors Kubernetes namespaces for persistently unhealthy pods
(containers in CrashLoopBackOff) and heals them by deleting the pod, forcing
its controller to recreate it.

The -n/--namespaces flag supports comma-separated values and simple wildcards (*).
"""

EPILOG = """\
examples:
  k8s-healer -n prod,staging              # Watch specific namespaces
  k8s-healer -n 'app-*-dev,kube-*'        # Watch namespaces matching wildcards
  k8s-healer                              # Watch all namespaces
  k8s-healer -k /path/to/my/kubeconfig    # Use specific kubeconfig
"""


def build_parser(settings: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="k8s-healer",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-k", "--kubeconfig", default=settings.kube_config_path,
                        help="Path to the kubeconfig file (defaults to standard locations).")
    parser.add_argument("-n", "--namespaces", default=settings.namespaces,
                        help="Comma-separated list of namespaces to watch. Supports wildcards (*). "
                             "Defaults to all namespaces if empty.")
    parser.add_argument("--heal-cooldown", default=settings.heal_cooldown,
                        help="Minimum time between healing the same Pod (e.g. 10m, 30s).")
    parser.add_argument("--restart-threshold", type=int, default=settings.restart_threshold,
                        help="Restarts a CrashLoopBackOff container needs before its Pod is healed.")
    parser.add_argument("--resync-period", default=settings.resync_period,
                        help="Interval at which every watched Pod is re-evaluated.")
    parser.add_argument("--delete-timeout", default=settings.delete_timeout,
                        help="Upper bound for a single delete API call.")
    parser.add_argument("--dry-run", action="store_true", default=settings.dry_run,
                        help="Watch and classify, but only log the deletions.")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", choices=["json", "console"], default=settings.log_format)
    return parser


def build_engine_config(args: argparse.Namespace, settings: Config) -> EngineConfig:
    return EngineConfig(
        cooldown_window=parse_duration(args.heal_cooldown),
        restart_threshold=args.restart_threshold,
        resync_period=parse_duration(args.resync_period),
        delete_timeout=parse_duration(args.delete_timeout),
        sweep_interval=parse_duration(settings.sweep_interval),
        shutdown_grace=parse_duration(settings.shutdown_grace),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point"""
    settings = Config()
    args = build_parser(settings).parse_args(argv)

    setup_logging(args.log_level, args.log_format)
    logger = get_logger("main")

    try:
        engine_config = build_engine_config(args, settings)
        k8s_client = KubernetesClient(kube_config_path=args.kubeconfig, dry_run=args.dry_run)
        namespaces = resolve_namespaces(args.namespaces, k8s_client.list_namespaces)
    except ConfigurationError as e:
        logger.error("Failed to start healer", error=str(e))
        return 1

    engine = RemediationEngine(
        engine_config,
        namespaces,
        k8s_client,
        notification_manager=NotificationManager(
            pushgateway_url=settings.pushgateway_url,
            job_name=settings.prometheus_job_name,
            cluster_name=settings.cluster_name,
        ),
    )

    def handle_signal(signum, frame):
        engine.trigger_shutdown()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    engine.run()
    logger.info("Healer stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
