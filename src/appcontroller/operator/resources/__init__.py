from typing import Dict

from ...crds.const import CONTROLLER_NAME


def deployment_name(app_name: str) -> str:
    return f"{app_name}-deployment"


def service_name(app_name: str) -> str:
    return f"{app_name}-service"


def selector_labels(app_name: str) -> Dict[str, str]:
    """Labels that tie pods to their App."""
    return {"app": app_name}


def managed_labels(app_name: str) -> Dict[str, str]:
    """Labels stamped on every child object the controller manages."""
    return {"app": app_name, "controller": CONTROLLER_NAME}
