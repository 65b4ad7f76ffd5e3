import logging
import os

from rich.console import Console

from ...crds.errors import KubeConfigError
from ...operator.config import CONFIG_PATH_ENV, Configuration
from ...utils.kube import load_kube_config


def run_controller(configuration: Configuration, verbose: bool = False) -> None:
    """Runs the controller in the foreground until interrupted."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()
    try:
        load_kube_config()
    except KubeConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    if configuration.path:
        # The handler module loads its timer interval from this file on import.
        os.environ[CONFIG_PATH_ENV] = str(configuration.path)
    # Importing the module registers the kopf handlers.
    from ...operator import operator

    operator.run(configuration)
