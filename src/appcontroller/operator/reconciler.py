"""
Reconciliation of a single App.

One pass walks the phases below strictly in order:

    Start -> Fetched -> DeploymentConverged -> ServiceConverged -> StatusSynced -> Done

Any error aborts the pass where it happened and is re-raised unchanged for the
caller to retry with backoff. Writes made by earlier phases of the same
pass are kept. A successful pass asks to be run again after
``requeue_after`` seconds; a pass for a deleted App does not.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from ..crds.base import NamespacedName, adopt_child
from ..crds.errors import AbsenceError
from .convergence import ConvergeOutcome, converge_deployment, converge_service
from .resources.deployment import build_deployment
from .resources.service import build_service
from .status import sync_app_status
from .store import ResourceStore

DEFAULT_REQUEUE_AFTER = 30.0


class ReconcilePhase(str, enum.Enum):
    START = "Start"
    FETCHED = "Fetched"
    DEPLOYMENT_CONVERGED = "DeploymentConverged"
    SERVICE_CONVERGED = "ServiceConverged"
    STATUS_SYNCED = "StatusSynced"
    DONE = "Done"


@dataclass
class ReconcileResult:
    phase: ReconcilePhase
    message: str
    requeue_after: Optional[float] = None
    deployment: Optional[ConvergeOutcome] = None
    service: Optional[ConvergeOutcome] = None
    ready_replicas: Optional[int] = None
    status_updated: bool = False


class AppReconciler:
    """
    Drives the children of an App toward its spec and reports readiness back.
    """

    def __init__(self, store: ResourceStore, requeue_after: float = DEFAULT_REQUEUE_AFTER) -> None:
        self.store = store
        self.requeue_after = requeue_after

    async def reconcile(self, key: NamespacedName, logger: logging.Logger) -> ReconcileResult:
        phase = ReconcilePhase.START
        try:
            try:
                app = await self.store.apps.get(key.namespace, key.name)
            except AbsenceError:
                # Children go away through their owner references.
                logger.info("App resource not found. Ignoring since object must be deleted.")
                return ReconcileResult(phase=ReconcilePhase.DONE, message="App not found")
            phase = ReconcilePhase.FETCHED

            deployment = build_deployment(app)
            adopt_child(app, deployment)
            deployment_outcome = await converge_deployment(self.store.deployments, deployment, logger)
            phase = ReconcilePhase.DEPLOYMENT_CONVERGED

            service = build_service(app)
            adopt_child(app, service)
            service_outcome = await converge_service(self.store.services, service, logger)
            phase = ReconcilePhase.SERVICE_CONVERGED

            status = await sync_app_status(app, self.store, logger)
            phase = ReconcilePhase.STATUS_SYNCED
        except Exception as e:
            logger.warning(f"Reconcile aborted after phase '{phase.value}': {e}")
            raise

        logger.debug(
            f"Deployment {deployment_outcome.value}, Service {service_outcome.value}, "
            f"{status.ready_replicas} ready replica(s)."
        )
        return ReconcileResult(
            phase=ReconcilePhase.DONE,
            message="Deployment and Service reconciled",
            requeue_after=self.requeue_after,
            deployment=deployment_outcome,
            service=service_outcome,
            ready_replicas=status.ready_replicas,
            status_updated=status.updated,
        )


async def reconcile_app(
    key: NamespacedName,
    store: ResourceStore,
    logger: logging.Logger,
    requeue_after: float = DEFAULT_REQUEUE_AFTER,
) -> ReconcileResult:
    """
    Run one reconcile pass for the App identified by ``key``.

    Args:
        key: Namespace and name of the App
        store: Stores to read and write through
        logger: Logger instance
        requeue_after: Delay before the next periodic pass

    Returns:
        The outcome of the pass
    """
    reconciler = AppReconciler(store, requeue_after=requeue_after)
    return await reconciler.reconcile(key, logger)
