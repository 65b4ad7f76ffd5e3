from typing import Any, Dict

from ...crds.app import App
from . import deployment_name, managed_labels, selector_labels

CONTAINER_NAME = "app-container"


def build_deployment(app: App) -> Dict[str, Any]:
    """Builds the Deployment that runs the App's pods."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": deployment_name(app.name),
            "namespace": app.namespace,
            "labels": managed_labels(app.name),
        },
        "spec": {
            "replicas": app.spec.replicas,
            "selector": {"matchLabels": selector_labels(app.name)},
            "template": {
                "metadata": {"labels": selector_labels(app.name)},
                "spec": {
                    "containers": [
                        {
                            "name": CONTAINER_NAME,
                            "image": app.spec.image,
                            "ports": [{"containerPort": app.spec.port}],
                        }
                    ],
                },
            },
        },
    }
