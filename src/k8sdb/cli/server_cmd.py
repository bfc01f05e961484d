"""Server command."""

from rich.console import Console

console = Console()


def start_command(
    config_path: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the k8sdb API server in the foreground.

    Args:
        config_path: Optional path to config file
        host: Bind address override
        port: Port override
    """
    import uvicorn

    from k8sdb.config.loader import load_config
    from k8sdb.server.app import create_app

    config = load_config(config_path)
    host = host or config.server.host
    port = port or config.server.port

    app = create_app(config)

    console.print(f"[green]Starting k8sdb server on {host}:{port}[/green]")
    console.print("  POST   /couchdb?name=<cluster>")
    console.print("  DELETE /couchdb/<cluster>")
    console.print("\nPress Ctrl+C to stop")

    uvicorn.run(app, host=host, port=port, log_level=config.logging.level.lower())
