"""
Convergence of a single child object toward its desired manifest.

Drift detection is deliberately shallow. Only the fields the controller
derives from the App spec are compared and written back, so defaults filled
in by the API server or admission webhooks, extra labels, and settings
added by other controllers are left alone.
"""
import copy
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..crds.errors import AbsenceError
from .store import ChildStore


class ConvergeOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    UP_TO_DATE = "up to date"


@dataclass(frozen=True)
class EqualityPolicy:
    """How one kind decides whether an existing spec needs rewriting."""

    equal: Callable[[Dict[str, Any], Dict[str, Any]], bool]
    overwrite: Callable[[Dict[str, Any], Dict[str, Any]], None]


def int_value(value: Any) -> int:
    """Numeric value of an int-or-string port; non-numeric strings count as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except ValueError:
        return 0


def _containers(spec: Dict[str, Any]) -> List[Dict[str, Any]]:
    return ((spec.get("template") or {}).get("spec") or {}).get("containers") or []


def _ports(container: Dict[str, Any]) -> List[Dict[str, Any]]:
    return container.get("ports") or []


def deployment_equal(existing: Dict[str, Any], desired: Dict[str, Any]) -> bool:
    if existing.get("replicas") != desired.get("replicas"):
        return False

    existing_containers = _containers(existing)
    desired_containers = _containers(desired)
    if len(existing_containers) != len(desired_containers):
        return False

    if existing_containers:
        current, wanted = existing_containers[0], desired_containers[0]
        if current.get("image") != wanted.get("image"):
            return False
        if len(_ports(current)) != len(_ports(wanted)):
            return False
        if _ports(current) and (
            _ports(current)[0].get("containerPort") != _ports(wanted)[0].get("containerPort")
        ):
            return False
    return True


def overwrite_deployment_spec(existing: Dict[str, Any], desired: Dict[str, Any]) -> None:
    """Copy the compared Deployment fields from ``desired`` into ``existing``."""
    existing["replicas"] = desired.get("replicas")

    pod_spec = existing.setdefault("template", {}).setdefault("spec", {})
    desired_containers = _containers(desired)
    if len(pod_spec.get("containers") or []) != len(desired_containers):
        pod_spec["containers"] = copy.deepcopy(desired_containers)
        return
    if not desired_containers:
        return

    current, wanted = pod_spec["containers"][0], desired_containers[0]
    current["image"] = wanted.get("image")
    if len(_ports(current)) != len(_ports(wanted)):
        current["ports"] = copy.deepcopy(_ports(wanted))
    elif _ports(wanted):
        current["ports"][0]["containerPort"] = _ports(wanted)[0].get("containerPort")


def service_equal(existing: Dict[str, Any], desired: Dict[str, Any]) -> bool:
    if existing.get("type") != desired.get("type"):
        return False

    existing_ports = existing.get("ports") or []
    desired_ports = desired.get("ports") or []
    if len(existing_ports) != len(desired_ports):
        return False

    if existing_ports and desired_ports:
        current, wanted = existing_ports[0], desired_ports[0]
        if (
            current.get("port") != wanted.get("port")
            or int_value(current.get("targetPort")) != int_value(wanted.get("targetPort"))
            or current.get("protocol") != wanted.get("protocol")
        ):
            return False
    # Selector and clusterIP are intentionally not compared.
    return True


def overwrite_service_spec(existing: Dict[str, Any], desired: Dict[str, Any]) -> None:
    """Copy the compared Service fields from ``desired`` into ``existing``."""
    existing["type"] = desired.get("type")

    desired_ports = desired.get("ports") or []
    if len(existing.get("ports") or []) != len(desired_ports):
        existing["ports"] = copy.deepcopy(desired_ports)
        return
    if desired_ports:
        current, wanted = existing["ports"][0], desired_ports[0]
        for field in ("port", "targetPort", "protocol"):
            current[field] = wanted.get(field)


DEPLOYMENT_POLICY = EqualityPolicy(equal=deployment_equal, overwrite=overwrite_deployment_spec)
SERVICE_POLICY = EqualityPolicy(equal=service_equal, overwrite=overwrite_service_spec)


async def converge(
    store: ChildStore,
    desired: Dict[str, Any],
    policy: EqualityPolicy,
    logger: logging.Logger,
) -> ConvergeOutcome:
    """
    Make the object described by ``desired`` exist and match it.

    Args:
        store: Store for the object's kind
        desired: Full desired manifest, owner reference already attached
        policy: Equality policy for the kind
        logger: Logger instance

    Returns:
        What was done to the object.

    Raises:
        TransientStoreError: If reading (other than a 404) or writing fails.
    """
    kind = store.kind
    name = desired["metadata"]["name"]
    namespace = desired["metadata"]["namespace"]

    try:
        existing = await store.get(namespace, name)
    except AbsenceError:
        logger.info(f"Creating {kind} '{name}' in namespace '{namespace}'.")
        await store.create(namespace, desired)
        return ConvergeOutcome.CREATED

    spec = existing.setdefault("spec", {})
    if policy.equal(spec, desired["spec"]):
        logger.debug(f"{kind} '{name}' is up to date.")
        return ConvergeOutcome.UP_TO_DATE

    logger.info(f"Updating {kind} '{name}' in namespace '{namespace}'.")
    policy.overwrite(spec, desired["spec"])
    await store.update(namespace, name, existing)
    return ConvergeOutcome.UPDATED


async def converge_deployment(
    store: ChildStore, desired: Dict[str, Any], logger: logging.Logger
) -> ConvergeOutcome:
    return await converge(store, desired, DEPLOYMENT_POLICY, logger)


async def converge_service(
    store: ChildStore, desired: Dict[str, Any], logger: logging.Logger
) -> ConvergeOutcome:
    return await converge(store, desired, SERVICE_POLICY, logger)
