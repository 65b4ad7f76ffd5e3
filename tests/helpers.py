"""
In-memory stand-ins for the kubernetes API classes the controller talks to.

``FakeCluster`` keeps objects as dicts keyed by (kind, namespace, name) and
mimics the API server closely enough for reconcile tests: 404 on missing
objects, 409 on duplicate creates and on stale resourceVersions, and status
writes that only touch ``status``. Every successful write is recorded in
``writes`` so tests can assert on idempotence.
"""
import copy
import itertools
from typing import Any, Dict, List, Optional, Tuple

from kubernetes.client.rest import ApiException

from appcontroller.crds.const import CRD_GROUP, CRD_KIND_APP, CRD_VERSION
from appcontroller.operator.store import ResourceStore

Key = Tuple[str, str, str]


class FakeCluster:
    def __init__(self) -> None:
        self.objects: Dict[Key, Dict[str, Any]] = {}
        self.writes: List[Tuple[str, str, str]] = []
        self.failures: Dict[Tuple[str, str], ApiException] = {}
        self._versions = itertools.count(1)
        self._uids = itertools.count(1)
        self.custom_objects_api = FakeCustomObjectsApi(self)
        self.apps_v1 = FakeAppsV1Api(self)
        self.core_v1 = FakeCoreV1Api(self)

    # --- test setup -----------------------------------------------------

    def store(self) -> ResourceStore:
        return ResourceStore.from_clients(self.custom_objects_api, self.apps_v1, self.core_v1)

    def fail(self, verb: str, kind: str, status: int = 500, reason: str = "Internal Server Error") -> None:
        """Make every ``verb`` ('read', 'create', 'replace', 'list') on ``kind`` fail."""
        self.failures[(verb, kind)] = ApiException(status=status, reason=reason)

    def heal(self) -> None:
        self.failures.clear()

    def add_app(
        self,
        name: str,
        namespace: str = "default",
        image: str = "nginx:1.0",
        replicas: int = 3,
        port: int = 8080,
        status: Optional[Dict[str, Any]] = None,
        uid: Optional[str] = "auto",
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "apiVersion": f"{CRD_GROUP}/{CRD_VERSION}",
            "kind": CRD_KIND_APP,
            "metadata": {"name": name, "namespace": namespace},
            "spec": {"image": image, "replicas": replicas, "port": port},
        }
        if status is not None:
            body["status"] = status
        return self.put(body, uid=uid)

    def add_pod(self, name: str, app: str, ready: bool, namespace: str = "default") -> Dict[str, Any]:
        body = {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": name, "namespace": namespace, "labels": {"app": app}},
            "status": {
                "conditions": [
                    {"type": "PodScheduled", "status": "True"},
                    {"type": "Ready", "status": "True" if ready else "False"},
                ]
            },
        }
        return self.put(body)

    def put(self, body: Dict[str, Any], uid: Optional[str] = "auto") -> Dict[str, Any]:
        """Store ``body`` as-is, the way another actor editing the object would."""
        body = copy.deepcopy(body)
        metadata = body["metadata"]
        if uid == "auto":
            metadata.setdefault("uid", f"uid-{next(self._uids)}")
        elif uid is not None:
            metadata["uid"] = uid
        metadata["resourceVersion"] = str(next(self._versions))
        self.objects[(body["kind"], metadata["namespace"], metadata["name"])] = body
        return copy.deepcopy(body)

    def get(self, kind: str, namespace: str, name: str) -> Dict[str, Any]:
        return copy.deepcopy(self.objects[(kind, namespace, name)])

    def exists(self, kind: str, namespace: str, name: str) -> bool:
        return (kind, namespace, name) in self.objects

    def writes_for(self, kind: str) -> List[Tuple[str, str, str]]:
        return [write for write in self.writes if write[1] == kind]

    # --- API server behaviour ------------------------------------------

    def _check(self, verb: str, kind: str) -> None:
        failure = self.failures.get((verb, kind))
        if failure is not None:
            raise failure

    def read(self, kind: str, namespace: str, name: str) -> Dict[str, Any]:
        self._check("read", kind)
        if (kind, namespace, name) not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        return self.get(kind, namespace, name)

    def create(self, kind: str, namespace: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self._check("create", kind)
        body = copy.deepcopy(body)
        body["metadata"]["namespace"] = namespace
        if self.exists(kind, namespace, body["metadata"]["name"]):
            raise ApiException(status=409, reason="AlreadyExists")
        self.writes.append(("create", kind, body["metadata"]["name"]))
        return self.put(body)

    def replace(self, kind: str, namespace: str, name: str, body: Dict[str, Any], status_only: bool = False) -> Dict[str, Any]:
        self._check("replace", kind)
        if not self.exists(kind, namespace, name):
            raise ApiException(status=404, reason="Not Found")
        current = self.objects[(kind, namespace, name)]
        sent_version = body.get("metadata", {}).get("resourceVersion")
        if sent_version and sent_version != current["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")

        if status_only:
            updated = copy.deepcopy(current)
            updated["status"] = copy.deepcopy(body.get("status"))
            self.writes.append(("replace_status", kind, name))
        else:
            updated = copy.deepcopy(body)
            updated["metadata"]["uid"] = current["metadata"].get("uid")
            self.writes.append(("replace", kind, name))
        return self.put(updated, uid=None)

    def list(self, kind: str, namespace: Optional[str], label_selector: str = "") -> Dict[str, Any]:
        self._check("list", kind)
        wanted = dict(part.split("=", 1) for part in label_selector.split(",") if part)
        items = []
        for (item_kind, item_namespace, _), obj in sorted(self.objects.items()):
            if item_kind != kind or (namespace and item_namespace != namespace):
                continue
            labels = obj["metadata"].get("labels") or {}
            if all(labels.get(key) == value for key, value in wanted.items()):
                items.append(copy.deepcopy(obj))
        return {"items": items}


class FakeCustomObjectsApi:
    def __init__(self, cluster: FakeCluster) -> None:
        self.cluster = cluster

    def get_namespaced_custom_object(self, group, version, namespace, plural, name):
        return self.cluster.read(CRD_KIND_APP, namespace, name)

    def replace_namespaced_custom_object_status(self, group, version, namespace, plural, name, body):
        return self.cluster.replace(CRD_KIND_APP, namespace, name, body, status_only=True)

    def list_namespaced_custom_object(self, group, version, namespace, plural):
        return self.cluster.list(CRD_KIND_APP, namespace)

    def list_cluster_custom_object(self, group, version, plural):
        return self.cluster.list(CRD_KIND_APP, None)


class FakeAppsV1Api:
    def __init__(self, cluster: FakeCluster) -> None:
        self.cluster = cluster

    def read_namespaced_deployment(self, name, namespace):
        return self.cluster.read("Deployment", namespace, name)

    def create_namespaced_deployment(self, namespace, body):
        return self.cluster.create("Deployment", namespace, body)

    def replace_namespaced_deployment(self, name, namespace, body):
        return self.cluster.replace("Deployment", namespace, name, body)


class FakeCoreV1Api:
    def __init__(self, cluster: FakeCluster) -> None:
        self.cluster = cluster

    def read_namespaced_service(self, name, namespace):
        return self.cluster.read("Service", namespace, name)

    def create_namespaced_service(self, namespace, body):
        return self.cluster.create("Service", namespace, body)

    def replace_namespaced_service(self, name, namespace, body):
        return self.cluster.replace("Service", namespace, name, body)

    def list_namespaced_pod(self, namespace, label_selector=""):
        return self.cluster.list("Pod", namespace, label_selector)
