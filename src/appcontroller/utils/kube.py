import logging
from typing import Optional

from kubernetes import config

from ..crds.errors import KubeConfigError


def load_kube_config(logger: Optional[logging.Logger] = None) -> None:
    """Use the in-cluster service account when available, else the local kubeconfig."""
    logger = logger or logging.getLogger(__name__)
    try:
        config.load_incluster_config()
        logger.info("Using in-cluster Kubernetes configuration.")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.info("Using local kubeconfig.")
        except config.ConfigException as e:
            logger.error(f"Could not configure Kubernetes client: {e}")
            raise KubeConfigError("Could not configure Kubernetes client.") from e
