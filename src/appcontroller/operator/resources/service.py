from typing import Any, Dict

from ...crds.app import App
from . import managed_labels, selector_labels, service_name


def build_service(app: App) -> Dict[str, Any]:
    """Builds the ClusterIP Service exposing the App's port inside the cluster."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": service_name(app.name),
            "namespace": app.namespace,
            "labels": managed_labels(app.name),
        },
        "spec": {
            "selector": selector_labels(app.name),
            "ports": [
                {
                    "protocol": "TCP",
                    "port": app.spec.port,
                    "targetPort": app.spec.port,
                }
            ],
            "type": "ClusterIP",
        },
    }
