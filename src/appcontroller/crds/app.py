import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import BaseCustomResource, ObjectMeta
from .const import CRD_GROUP, CRD_KIND_APP, CRD_PLURAL_APP, CRD_VERSION


@dataclass(frozen=True)
class AppSpec:
    """Desired workload shape. Validated by the CRD schema before we see it."""

    image: str
    replicas: int
    port: int

    @classmethod
    def from_dict(cls, spec: Dict[str, Any]) -> "AppSpec":
        return cls(
            image=str(spec["image"]),
            replicas=int(spec["replicas"]),
            port=int(spec["port"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"image": self.image, "replicas": self.replicas, "port": self.port}


@dataclass
class AppStatus:
    # Number of pods currently reporting Ready.
    replicas: int = 0
    conditions: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, status: Optional[Dict[str, Any]]) -> "AppStatus":
        status = status or {}
        return cls(
            replicas=int(status.get("replicas") or 0),
            conditions=list(status.get("conditions") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"replicas": self.replicas}
        if self.conditions:
            data["conditions"] = copy.deepcopy(self.conditions)
        return data


@dataclass
class App(BaseCustomResource):
    group = CRD_GROUP
    version = CRD_VERSION
    kind = CRD_KIND_APP
    plural = CRD_PLURAL_APP
    namespaced = True

    metadata: ObjectMeta
    spec: AppSpec
    status: AppStatus = field(default_factory=AppStatus)
    body: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "App":
        """Build an App from an API response, keeping the raw body around."""
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            spec=AppSpec.from_dict(data["spec"]),
            status=AppStatus.from_dict(data.get("status")),
            body=copy.deepcopy(data),
        )

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["spec"] = self.spec.to_dict()
        data["status"] = self.status.to_dict()
        return data
