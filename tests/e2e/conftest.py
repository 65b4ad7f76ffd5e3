"""
Fixtures for end-to-end tests against a real cluster.

These load the local kubeconfig, install the App CRD, create a throwaway
namespace and run the controller in a background thread for the session.
"""
import asyncio
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict

import kopf
import pytest
import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException


CRD_PATH = Path(__file__).parents[2] / "crds" / "webapp.example.com_apps.yaml"
E2E_NAMESPACE = os.getenv("APP_CONTROLLER_E2E_NAMESPACE") or f"app-e2e-{uuid.uuid4().hex[:8]}"


@pytest.fixture(scope="session")
def k8s_clients() -> Dict[str, Any]:
    config.load_kube_config()
    return {
        "apps_v1": client.AppsV1Api(),
        "core_v1": client.CoreV1Api(),
        "custom_objects_api": client.CustomObjectsApi(),
        "apiextensions_v1": client.ApiextensionsV1Api(),
    }


@pytest.fixture(scope="session")
def e2e_namespace(k8s_clients: Dict[str, Any]):
    """Installs the CRD and creates the test namespace; removes the namespace afterwards."""
    with open(CRD_PATH) as f:
        crd = yaml.safe_load(f)
    try:
        k8s_clients["apiextensions_v1"].create_custom_resource_definition(body=crd)
        # Give the API server a moment to serve the new resource.
        time.sleep(2)
    except ApiException as e:
        if e.status != 409:
            raise

    core_v1 = k8s_clients["core_v1"]
    core_v1.create_namespace(body={"metadata": {"name": E2E_NAMESPACE}})
    yield E2E_NAMESPACE
    try:
        core_v1.delete_namespace(name=E2E_NAMESPACE)
    except ApiException as e:
        if e.status != 404:
            raise


@pytest.fixture(scope="session")
def running_controller(e2e_namespace: str):
    """Runs the controller against the test namespace until the session ends."""
    # A short requeue interval for tests; read when the handlers are imported.
    os.environ["APP_CONTROLLER_REQUEUE_INTERVAL"] = "5s"

    # Import the operator module to ensure handlers are registered
    import appcontroller.operator.operator  # noqa: F401

    stop_flag = threading.Event()

    def run_operator() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(
                kopf.operator(
                    registry=kopf.get_default_registry(),
                    standalone=True,
                    namespaces=[e2e_namespace],
                    stop_flag=stop_flag,
                )
            )
        finally:
            loop.close()

    thread = threading.Thread(target=run_operator, name="app-controller", daemon=True)
    thread.start()
    yield
    stop_flag.set()
    thread.join(timeout=30)
