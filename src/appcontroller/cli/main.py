from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import handlers
from ..crds.errors import KubeConfigError
from ..operator.config import load_config
from ..utils.kube import load_kube_config


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the controller config file.",
)
@click.pass_context
def main(ctx, config_path: Optional[Path]) -> None:
    """A controller and toolbox for webapp.example.com Apps."""
    ctx.ensure_object(dict)
    ctx.obj["CONFIG"] = load_config(config_path)


@main.command(help="Run the App controller.")
@click.option("--namespace", type=str, default=None, help="Only watch this namespace.")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of parallel reconcile workers.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def run(ctx, namespace: Optional[str], workers: Optional[int], verbose: bool) -> None:
    """Run the App controller."""
    configuration = ctx.obj["CONFIG"].override(namespace=namespace, workers=workers)
    handlers.run_controller(configuration, verbose=verbose)


@main.command(help="Print the Deployment and Service managed for an App.")
@click.argument("name", type=str)
@click.option("--image", type=str, required=True, help="The container image to run.")
@click.option("--replicas", type=click.IntRange(min=1), default=1, help="The number of pods.")
@click.option(
    "--port", type=click.IntRange(1, 65535), required=True, help="The port the app listens on."
)
@click.option("--namespace", type=str, default="default", help="The App's namespace.")
def render(name: str, image: str, replicas: int, port: int, namespace: str) -> None:
    """Print the Deployment and Service managed for an App."""
    handlers.render_app(name=name, namespace=namespace, image=image, replicas=replicas, port=port)


@main.command(name="list", help="List Apps and their readiness.")
@click.option(
    "--namespace",
    type=str,
    default=None,
    help="The namespace to list. Defaults to the configured namespace, else \"default\".",
)
@click.option("-A", "--all-namespaces", is_flag=True, help="List Apps in all namespaces.")
@click.pass_context
def list_command(ctx, namespace: Optional[str], all_namespaces: bool) -> None:
    """List Apps and their readiness."""
    namespace = namespace or ctx.obj["CONFIG"].namespace or "default"
    try:
        load_kube_config()
    except KubeConfigError as e:
        Console().print(f"[red]{e}[/red]")
        raise SystemExit(1)
    handlers.list_apps(namespace=None if all_namespaces else namespace)


if __name__ == "__main__":
    main()
