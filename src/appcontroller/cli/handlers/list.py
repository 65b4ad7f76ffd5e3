import asyncio
from typing import Optional

from rich.console import Console
from rich.table import Table

from ...crds.errors import StoreError
from ...operator.store import AppStore


def list_apps(namespace: Optional[str] = None, store: Optional[AppStore] = None) -> None:
    """Lists Apps in a namespace, or in all namespaces when none is given."""
    console = Console()
    store = store or AppStore()

    try:
        apps = asyncio.run(store.list(namespace))
    except StoreError as e:
        console.print(f"[red]Error listing Apps: {e}[/red]")
        return

    if not apps:
        scope = f"namespace '{namespace}'" if namespace else "any namespace"
        console.print(f"No Apps found in {scope}.")
        return

    title = f"Apps in namespace [bold]{namespace}[/bold]" if namespace else "Apps in all namespaces"
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Namespace")
    table.add_column("Image", style="magenta")
    table.add_column("Desired", justify="right")
    table.add_column("Ready", style="green", justify="right")
    table.add_column("Port", style="yellow", justify="right")

    for app in apps:
        table.add_row(
            app.name,
            app.namespace,
            app.spec.image,
            str(app.spec.replicas),
            str(app.status.replicas),
            str(app.spec.port),
        )
    console.print(table)
