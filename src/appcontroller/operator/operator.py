"""
Kubernetes operator for App custom resources.

This module contains the Kopf handlers for Apps and the Deployments and
Services they own. The handlers are kept thin and delegate to specialized
modules for:
- Building the desired children (resources/)
- Reading and writing through the Kubernetes API (store.py)
- The reconcile pass itself (reconciler.py)
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Mapping, Optional

import kopf

from ..crds.base import NamespacedName
from ..crds.const import CONTROLLER_NAME, CRD_GROUP, CRD_KIND_APP, CRD_PLURAL_APP, CRD_VERSION
from ..crds.errors import AppControllerException, KubeConfigError
from ..utils.kube import load_kube_config
from .config import Configuration, load_config
from .log import get_object_logger
from .reconciler import AppReconciler, ReconcileResult
from .store import ResourceStore

# Operator settings. `app-controller run` replaces them through configure().
operator_config = load_config()
REQUEUE_INTERVAL = operator_config.requeue_interval

# Labels every managed Deployment and Service carries.
CHILD_LABELS = {"controller": CONTROLLER_NAME}

# Passes for the same App never overlap.
_app_locks: Dict[NamespacedName, asyncio.Lock] = defaultdict(asyncio.Lock)


def configure(configuration: Configuration) -> None:
    global operator_config
    operator_config = configuration


@kopf.on.startup()
async def on_startup(
    settings: kopf.OperatorSettings, logger: logging.Logger, **kwargs: Any
) -> None:
    """
    Handle the startup of the operator.

    This configures the Kubernetes client and sets operator-wide settings.
    """
    try:
        load_kube_config(logger)
    except KubeConfigError as e:
        raise kopf.PermanentError(str(e)) from e

    # The default worker limit is unbounded which means you can EASILY flood
    # your API server on restart unless you limit it.
    settings.queueing.worker_limit = operator_config.workers

    # All logs by default go to the k8s event api. Disable event posting to
    # reduce API load.
    settings.posting.enabled = False

    settings.watching.server_timeout = operator_config.watch_timeout

    scope = operator_config.namespace or "all namespaces"
    logger.info(f"Operator started with {operator_config.workers} worker(s), watching {scope}.")


def owner_key(body: Mapping[str, Any]) -> Optional[NamespacedName]:
    """The App that controls ``body``, from its controller owner reference."""
    metadata = body.get("metadata") or {}
    for reference in metadata.get("ownerReferences") or []:
        group = (reference.get("apiVersion") or "").split("/")[0]
        if reference.get("controller") and reference.get("kind") == CRD_KIND_APP and group == CRD_GROUP:
            return NamespacedName(metadata.get("namespace") or "", reference["name"])
    return None


async def reconcile(
    key: NamespacedName, logger: logging.Logger, retry: int = 0
) -> ReconcileResult:
    """
    Run one reconcile pass for the App ``key``.

    Args:
        key: Namespace and name of the App
        logger: Logger instance
        retry: How many times kopf has already retried this handler

    Raises:
        kopf.TemporaryError: If the pass failed. kopf runs the handler again
            after a delay that doubles with every retry.
    """
    reconciler = AppReconciler(
        ResourceStore.from_clients(), requeue_after=operator_config.requeue_interval
    )
    async with _app_locks[key]:
        try:
            result = await reconciler.reconcile(key, logger)
        except AppControllerException as e:
            # The reconciler has already logged the failing phase; kopf logs the error.
            raise kopf.TemporaryError(str(e), delay=operator_config.retry_delay(retry)) from e
        if result.requeue_after is None:
            _app_locks.pop(key, None)
        return result


@kopf.on.create(CRD_GROUP, CRD_VERSION, CRD_PLURAL_APP)
@kopf.on.update(CRD_GROUP, CRD_VERSION, CRD_PLURAL_APP, field="spec")
@kopf.on.resume(CRD_GROUP, CRD_VERSION, CRD_PLURAL_APP)
async def reconcile_app_handler(
    name: str, namespace: str, logger: logging.Logger, retry: int = 0, **kwargs: Any
) -> None:
    """Handle App creation, spec changes and Apps found when the operator starts."""
    await reconcile(NamespacedName(namespace, name), logger, retry)


@kopf.timer(
    CRD_GROUP,
    CRD_VERSION,
    CRD_PLURAL_APP,
    interval=REQUEUE_INTERVAL,
    initial_delay=REQUEUE_INTERVAL,
)
async def requeue_app_handler(
    name: str, namespace: str, logger: logging.Logger, retry: int = 0, **kwargs: Any
) -> None:
    """Periodic pass, so pod readiness keeps flowing into the App status."""
    await reconcile(NamespacedName(namespace, name), logger, retry)


@kopf.on.event("apps", "v1", "deployments", labels=CHILD_LABELS)
@kopf.on.event("v1", "services", labels=CHILD_LABELS)
async def child_event_handler(body: Mapping[str, Any], **kwargs: Any) -> None:
    """
    Reconcile the owning App when one of its children changes or is deleted.

    Event handlers are not retried; a failed pass is picked up again by the
    periodic timer.
    """
    key = owner_key(body)
    if key is None:
        return
    await reconcile(key, get_object_logger(key))


def run(configuration: Optional[Configuration] = None) -> None:
    """Run the operator in the foreground until interrupted."""
    if configuration is not None:
        configure(configuration)
    namespace = operator_config.namespace
    kopf.run(
        registry=kopf.get_default_registry(),
        standalone=True,
        clusterwide=namespace is None,
        namespaces=[namespace] if namespace else (),
    )
