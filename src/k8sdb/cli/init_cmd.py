"""Initialize command - write a default configuration file."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from k8sdb.config.loader import resolve_config_path, save_config
from k8sdb.config.schema import K8sdbConfig

console = Console()


def init_command(force: bool = False, config_path: str | None = None) -> None:
    """Write a k8sdb.yaml with every setting at its default.

    Args:
        force: Overwrite existing config if present
        config_path: Where to write (default: K8SDB_CONFIG or ~/.k8sdb/k8sdb.yaml)
    """
    path: Path = resolve_config_path(config_path)

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("Use [bold]--force[/bold] to overwrite.")
        return

    written = save_config(K8sdbConfig(), path)

    console.print(
        Panel.fit(
            f"[green]✓[/green] Configuration written to [cyan]{written}[/cyan]\n"
            "Edit [bold]couchdb[/bold] to change the image or replica count, and\n"
            "[bold]kubernetes[/bold] to point at a specific kubeconfig or context.",
            border_style="blue",
        )
    )
