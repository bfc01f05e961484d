"""Main CLI application using Typer."""

import logging
import sys

import typer
from rich.console import Console

from k8sdb import __version__

app = typer.Typer(
    name="k8sdb",
    help="k8sdb - CouchDB clusters on Kubernetes",
    no_args_is_help=True,
)

console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@app.callback()
def setup(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    ctx.obj = {"verbose": verbose}
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _apply_log_level(ctx: typer.Context, config_path: str | None) -> None:
    """Use ``logging.level`` from the config file the command runs with."""
    if ctx.obj and ctx.obj.get("verbose"):
        return

    from k8sdb.config.loader import ConfigError, load_config

    try:
        level = load_config(config_path).logging.level
    except ConfigError:
        return  # Reported by the command itself
    logging.getLogger().setLevel(level)


@app.command()
def version():
    """Show k8sdb version."""
    console.print(f"k8sdb version {__version__}")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    config_path: str = typer.Option(None, "--config", "-c", help="Where to write the config"),
):
    """Write a default configuration file."""
    from k8sdb.cli.init_cmd import init_command

    init_command(force=force, config_path=config_path)


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Cluster name (namespace and database name)"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    timeout: float = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Give up waiting for the pods after this many seconds (default: wait forever)",
    ),
):
    """Create a CouchDB cluster and configure full-mesh replication."""
    from k8sdb.cli.cluster_cmd import cluster_create_command

    _apply_log_level(ctx, config_path)
    if not cluster_create_command(name, config_path=config_path, timeout=timeout):
        raise typer.Exit(code=1)


@app.command()
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Cluster name"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Delete a CouchDB cluster and its namespace."""
    from k8sdb.cli.cluster_cmd import cluster_delete_command

    _apply_log_level(ctx, config_path)
    if not cluster_delete_command(name, config_path=config_path):
        raise typer.Exit(code=1)


@app.command()
def status(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Cluster name"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Show the pods of a cluster."""
    from k8sdb.cli.cluster_cmd import cluster_status_command

    _apply_log_level(ctx, config_path)
    if not cluster_status_command(name, config_path=config_path):
        raise typer.Exit(code=1)


@app.command()
def start(
    ctx: typer.Context,
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port"),
):
    """Start the k8sdb API server."""
    from k8sdb.cli.server_cmd import start_command

    _apply_log_level(ctx, config_path)
    start_command(config_path=config_path, host=host, port=port)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
