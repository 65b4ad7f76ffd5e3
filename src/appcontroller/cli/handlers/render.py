from typing import Any, Dict, List

import click
import yaml

from ...crds.app import App, AppSpec
from ...crds.base import ObjectMeta
from ...operator.resources.deployment import build_deployment
from ...operator.resources.service import build_service


def render_manifests(name: str, namespace: str, image: str, replicas: int, port: int) -> List[Dict[str, Any]]:
    """The Deployment and Service the controller would manage for such an App."""
    app = App(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=AppSpec(image=image, replicas=replicas, port=port),
    )
    return [build_deployment(app), build_service(app)]


def render_app(name: str, namespace: str, image: str, replicas: int, port: int) -> None:
    """Prints the desired child manifests for an App as YAML."""
    manifests = render_manifests(name, namespace, image, replicas, port)
    click.echo(yaml.safe_dump_all(manifests, sort_keys=False), nl=False)
