"""FastAPI application factory."""

from fastapi import FastAPI

from k8sdb import __version__
from k8sdb.cluster.lifecycle import ClientFactory
from k8sdb.config.schema import K8sdbConfig
from k8sdb.server.routes import create_router


def create_app(config: K8sdbConfig, client_factory: ClientFactory | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: k8sdb configuration
        client_factory: Orchestrator client factory, for tests

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="k8sdb",
        description="CouchDB clusters on Kubernetes",
        version=__version__,
    )

    app.include_router(create_router(config, client_factory=client_factory))

    return app
