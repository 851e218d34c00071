"""
Namespace wildcard resolution
"""

from fnmatch import fnmatchcase
from typing import Callable, Iterable, List

from .config import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)


def split_patterns(namespaces_input: str) -> List[str]:
    return [p.strip() for p in namespaces_input.split(",") if p.strip()]


def resolve_namespaces(namespaces_input: str,
                       list_namespaces: Callable[[], Iterable[str]]) -> List[str]:
    """Turn the comma-separated namespace input into a concrete watch list.

    An empty input returns an empty list, which means "watch all namespaces".
    Input without ``*`` is returned as given and the cluster is not queried.
    Otherwise existing namespaces are matched against every pattern.
    """
    patterns = split_patterns(namespaces_input)
    if not patterns:
        return []

    if not any("*" in p for p in patterns):
        return patterns

    try:
        existing = list(list_namespaces())
    except Exception as e:
        raise ConfigurationError(f"Failed to list namespaces for wildcard resolution: {e}") from e

    resolved = sorted({
        ns for ns in existing
        if any(fnmatchcase(ns, pattern) for pattern in patterns)
    })

    if not resolved:
        raise ConfigurationError(
            f"Wildcard patterns {patterns} did not match any existing namespaces"
        )

    logger.info("Wildcards resolved", count=len(resolved), namespaces=resolved)
    return resolved
