"""CLI commands for cluster management."""

import asyncio

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from k8sdb.cluster.lifecycle import ClusterOperationError, create_cluster, delete_cluster
from k8sdb.config.loader import load_config
from k8sdb.config.schema import ReadinessConfig
from k8sdb.orchestrator.client import InstanceStatus, OrchestratorError
from k8sdb.orchestrator.kubernetes import get_orchestrator_client

console = Console()


async def _async_create(name: str, config_path: str | None = None, timeout: float | None = None) -> bool:
    """Async implementation of cluster creation."""
    config = load_config(config_path)
    if timeout is not None:
        try:
            config.readiness = ReadinessConfig.model_validate(
                {**config.readiness.model_dump(), "timeout": timeout}
            )
        except ValidationError:
            console.print(f"[red]✗[/red] --timeout must be a positive number of seconds, got {timeout}")
            return False

    console.print(
        f"[bold]Creating cluster [cyan]{name}[/cyan] "
        f"({config.couchdb.replicas} x {config.couchdb.image})...[/bold]"
    )

    try:
        edges = await create_cluster(name, config)
    except ClusterOperationError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print(f"Resources created so far remain; run [cyan]k8sdb delete {name}[/cyan] to remove them.")
        return False
    except OrchestratorError as e:
        console.print(f"[red]✗[/red] {e}")
        return False

    console.print(f"[green]✓[/green] Cluster {name} ready with {len(edges)} replications")
    return True


def cluster_create_command(
    name: str, config_path: str | None = None, timeout: float | None = None
) -> bool:
    """Create a CouchDB cluster and configure its replication mesh."""
    return asyncio.run(_async_create(name, config_path, timeout))


async def _async_delete(name: str, config_path: str | None = None) -> bool:
    """Async implementation of cluster deletion."""
    config = load_config(config_path)

    try:
        await delete_cluster(name, config)
    except (ClusterOperationError, OrchestratorError) as e:
        console.print(f"[red]✗[/red] {e}")
        return False

    console.print(f"[green]✓[/green] Cluster {name} deleting")
    return True


def cluster_delete_command(name: str, config_path: str | None = None) -> bool:
    """Delete a CouchDB cluster."""
    return asyncio.run(_async_delete(name, config_path))


async def _async_status(name: str, config_path: str | None = None) -> bool:
    """Async implementation of cluster status."""
    config = load_config(config_path)

    try:
        client = get_orchestrator_client(config.kubernetes)
    except OrchestratorError as e:
        console.print(f"[red]✗[/red] {e}")
        return False

    try:
        instances = await client.list_instances(name)
    except OrchestratorError as e:
        console.print(f"[red]✗[/red] {e}")
        return False
    finally:
        client.close()

    if not instances:
        console.print(f"[yellow]No instances found in namespace {name}[/yellow]")
        return True

    table = Table(title=f"Cluster {name}")
    table.add_column("Pod", style="cyan")
    table.add_column("Address", style="white")
    table.add_column("Status", style="white")

    for instance in instances:
        if instance.status == InstanceStatus.RUNNING:
            status = f"[green]{instance.status}[/green]"
        elif instance.status == InstanceStatus.PENDING:
            status = f"[yellow]{instance.status}[/yellow]"
        else:
            status = f"[red]{instance.status}[/red]"
        table.add_row(instance.name, instance.address or "-", status)

    console.print(table)

    running = sum(1 for instance in instances if instance.is_running)
    console.print(f"\n[bold]Summary:[/bold] {running}/{config.couchdb.replicas} replicas running")
    return True


def cluster_status_command(name: str, config_path: str | None = None) -> bool:
    """Show the instances of a cluster."""
    return asyncio.run(_async_status(name, config_path))
