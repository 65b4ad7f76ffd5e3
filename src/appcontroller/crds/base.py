import copy
from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional

import kopf

from .errors import OwnershipLinkError


class NamespacedName(NamedTuple):
    """Identity of a namespaced object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ObjectMeta:
    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data["name"],
            namespace=data.get("namespace"),
            uid=data.get("uid"),
            resource_version=data.get("resourceVersion"),
            labels=data.get("labels") or {},
            annotations=data.get("annotations") or {},
        )


class BaseCustomResource:
    group: str
    version: str
    kind: str
    plural: str
    namespaced: bool

    metadata: ObjectMeta
    body: Dict[str, Any]

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(self.metadata.namespace or "", self.metadata.name)

    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.body)
        data["apiVersion"] = self.api_version
        data["kind"] = self.kind
        return data


def adopt_child(owner: BaseCustomResource, obj: Dict[str, Any]) -> None:
    """
    Make ``owner`` the controlling owner of the manifest ``obj``.

    The owner reference is what the cluster garbage collector follows to
    delete ``obj`` once ``owner`` is gone. kopf also copies the owner's labels
    onto ``obj`` where ``obj`` does not set them itself.

    Raises:
        OwnershipLinkError: If the owner has no uid, lives in another
            namespace, or ``obj`` is already controlled by someone else.
    """
    if not owner.metadata.uid:
        raise OwnershipLinkError(f"{owner.kind} '{owner.key}' has no uid; it cannot own other objects")

    metadata = obj.setdefault("metadata", {})
    namespace = metadata.get("namespace")
    if owner.namespaced and namespace and namespace != owner.metadata.namespace:
        raise OwnershipLinkError(
            f"cross-namespace owner references are not allowed: "
            f"{owner.kind} '{owner.key}' cannot own an object in '{namespace}'"
        )

    for existing in metadata.get("ownerReferences") or []:
        if existing.get("controller") and existing.get("uid") != owner.metadata.uid:
            raise OwnershipLinkError(
                f"object '{metadata.get('name')}' is already controlled by "
                f"{existing.get('kind')} '{existing.get('name')}'"
            )

    kopf.adopt(obj, owner=owner.to_dict())
