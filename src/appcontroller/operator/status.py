"""Aggregation of pod readiness onto App status."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from ..crds.app import App
from .resources import selector_labels
from .store import ResourceStore


@dataclass
class StatusSyncResult:
    ready_replicas: int
    updated: bool


def is_pod_ready(pod: Dict[str, Any]) -> bool:
    for condition in (pod.get("status") or {}).get("conditions") or []:
        if condition.get("type") == "Ready" and condition.get("status") == "True":
            return True
    return False


def count_ready_pods(pods: Iterable[Dict[str, Any]]) -> int:
    return sum(1 for pod in pods if is_pod_ready(pod))


async def sync_app_status(
    app: App, store: ResourceStore, logger: logging.Logger
) -> StatusSyncResult:
    """
    Count the App's ready pods and record the count on its status.

    The status is only written when the count changed, which keeps the App's
    resourceVersion stable and avoids needless conflicts with other writers.
    """
    pods = await store.pods.list(app.namespace, selector_labels(app.name))
    ready = count_ready_pods(pods)

    if ready == app.status.replicas:
        logger.debug(f"App status already reports {ready} ready replica(s).")
        return StatusSyncResult(ready_replicas=ready, updated=False)

    app.status.replicas = ready
    await store.apps.update_status(app)
    logger.info(f"App status updated: {ready} ready replica(s).")
    return StatusSyncResult(ready_replicas=ready, updated=True)
