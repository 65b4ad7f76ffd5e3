"""
Typed access to the Kubernetes API, one small store per kind.

Every call runs the blocking kubernetes client in a worker thread and maps
client failures onto the controller's error taxonomy:

- HTTP 404 on a read becomes ``AbsenceError``.
- Anything else (other API statuses, conflicts, transport errors) becomes
  ``TransientStoreError``.

Results are always plain dicts in API (camelCase) form, whether the client
returned a model object or a dict.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from kubernetes import client
from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from ..crds.app import App
from ..crds.errors import AbsenceError, TransientStoreError


def format_label_selector(labels: Dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


class KindStore:
    kind: str

    def __init__(self, api_client: Optional[client.ApiClient] = None) -> None:
        self._serializer = api_client if api_client is not None else client.ApiClient()

    def _to_dict(self, obj: Any) -> Any:
        if obj is None or isinstance(obj, dict):
            return obj
        return self._serializer.sanitize_for_serialization(obj)

    async def _call(
        self,
        func: Callable[..., Any],
        target: Tuple[Optional[str], Optional[str]],
        *,
        read: bool = False,
        **kwargs: Any,
    ) -> Any:
        namespace, name = target
        try:
            result = await asyncio.to_thread(func, **kwargs)
        except ApiException as e:
            if read and e.status == 404:
                raise AbsenceError(self.kind, namespace, name, e.status, e.reason) from e
            raise TransientStoreError(self.kind, namespace, name, e.status, e.reason) from e
        except (HTTPError, OSError) as e:
            raise TransientStoreError(self.kind, namespace, name, reason=str(e)) from e
        return self._to_dict(result)


class ChildStore(KindStore):
    """get/create/update for a namespaced built-in kind the controller owns."""

    def _read(self) -> Callable[..., Any]:
        raise NotImplementedError

    def _create(self) -> Callable[..., Any]:
        raise NotImplementedError

    def _replace(self) -> Callable[..., Any]:
        raise NotImplementedError

    async def get(self, namespace: str, name: str) -> Dict[str, Any]:
        return await self._call(
            self._read(), (namespace, name), read=True, name=name, namespace=namespace
        )

    async def create(self, namespace: str, body: Dict[str, Any]) -> Dict[str, Any]:
        name = body.get("metadata", {}).get("name")
        return await self._call(
            self._create(), (namespace, name), namespace=namespace, body=body
        )

    async def update(self, namespace: str, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the object; the body's resourceVersion guards against lost updates."""
        return await self._call(
            self._replace(), (namespace, name), name=name, namespace=namespace, body=body
        )


class DeploymentStore(ChildStore):
    kind = "Deployment"

    def __init__(self, apps_v1: Optional[client.AppsV1Api] = None) -> None:
        super().__init__()
        self.apps_v1 = apps_v1 if apps_v1 is not None else client.AppsV1Api()

    def _read(self) -> Callable[..., Any]:
        return self.apps_v1.read_namespaced_deployment

    def _create(self) -> Callable[..., Any]:
        return self.apps_v1.create_namespaced_deployment

    def _replace(self) -> Callable[..., Any]:
        return self.apps_v1.replace_namespaced_deployment


class ServiceStore(ChildStore):
    kind = "Service"

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None) -> None:
        super().__init__()
        self.core_v1 = core_v1 if core_v1 is not None else client.CoreV1Api()

    def _read(self) -> Callable[..., Any]:
        return self.core_v1.read_namespaced_service

    def _create(self) -> Callable[..., Any]:
        return self.core_v1.create_namespaced_service

    def _replace(self) -> Callable[..., Any]:
        return self.core_v1.replace_namespaced_service


class PodStore(KindStore):
    kind = "Pod"

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None) -> None:
        super().__init__()
        self.core_v1 = core_v1 if core_v1 is not None else client.CoreV1Api()

    async def list(self, namespace: str, labels: Dict[str, str]) -> List[Dict[str, Any]]:
        pods = await self._call(
            self.core_v1.list_namespaced_pod,
            (namespace, None),
            namespace=namespace,
            label_selector=format_label_selector(labels),
        )
        return pods.get("items") or []


class AppStore(KindStore):
    kind = App.kind

    def __init__(self, custom_objects_api: Optional[client.CustomObjectsApi] = None) -> None:
        super().__init__()
        self.custom_objects_api = (
            custom_objects_api if custom_objects_api is not None else client.CustomObjectsApi()
        )

    async def get(self, namespace: str, name: str) -> App:
        data = await self._call(
            self.custom_objects_api.get_namespaced_custom_object,
            (namespace, name),
            read=True,
            group=App.group,
            version=App.version,
            namespace=namespace,
            plural=App.plural,
            name=name,
        )
        return App.from_dict(data)

    async def list(self, namespace: Optional[str] = None) -> List[App]:
        if namespace:
            data = await self._call(
                self.custom_objects_api.list_namespaced_custom_object,
                (namespace, None),
                group=App.group,
                version=App.version,
                namespace=namespace,
                plural=App.plural,
            )
        else:
            data = await self._call(
                self.custom_objects_api.list_cluster_custom_object,
                (None, None),
                group=App.group,
                version=App.version,
                plural=App.plural,
            )
        return [App.from_dict(item) for item in data.get("items", [])]

    async def update_status(self, app: App) -> App:
        """
        Write the App's status subresource.

        The body carries the resourceVersion the App was read at, so a write
        racing another writer fails with a conflict instead of clobbering it.
        """
        data = await self._call(
            self.custom_objects_api.replace_namespaced_custom_object_status,
            (app.namespace, app.name),
            group=App.group,
            version=App.version,
            namespace=app.namespace,
            plural=App.plural,
            name=app.name,
            body=app.to_dict(),
        )
        return App.from_dict(data)


@dataclass
class ResourceStore:
    """The per-kind stores a reconcile pass works against."""

    apps: AppStore
    deployments: DeploymentStore
    services: ServiceStore
    pods: PodStore

    @classmethod
    def from_clients(
        cls,
        custom_objects_api: Optional[client.CustomObjectsApi] = None,
        apps_v1: Optional[client.AppsV1Api] = None,
        core_v1: Optional[client.CoreV1Api] = None,
    ) -> "ResourceStore":
        core_v1 = core_v1 if core_v1 is not None else client.CoreV1Api()
        return cls(
            apps=AppStore(custom_objects_api),
            deployments=DeploymentStore(apps_v1),
            services=ServiceStore(core_v1),
            pods=PodStore(core_v1),
        )
