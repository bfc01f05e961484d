"""API routes for the k8sdb server."""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from k8sdb.cluster.lifecycle import (
    ClientFactory,
    ClusterOperationError,
    create_cluster,
    delete_cluster,
)
from k8sdb.config.schema import K8sdbConfig
from k8sdb.orchestrator.client import OrchestratorError

logger = logging.getLogger(__name__)

MISSING_NAME_ERROR = "Cluster name must be passed via query params"


class StatusResponse(BaseModel):
    """Accepted create/delete request."""

    status: str


class ErrorResponse(BaseModel):
    """Failed request."""

    error: str
    state: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


def _error_response(error: Exception) -> JSONResponse:
    state = error.state.value if isinstance(error, ClusterOperationError) else None
    body = ErrorResponse(error=str(error), state=state)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def create_router(config: K8sdbConfig, client_factory: ClientFactory | None = None) -> APIRouter:
    """Create API router for cluster operations.

    Args:
        config: k8sdb configuration
        client_factory: Builds the orchestrator client per request
                        (default: Kubernetes client from config)

    Returns:
        Configured API router
    """
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        from k8sdb import __version__

        return HealthResponse(status="healthy", version=__version__)

    @router.post(
        "/couchdb",
        response_model=StatusResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def create_couchdb_cluster(name: str | None = Query(default=None)):
        """Create a CouchDB cluster and wait until its replication mesh is configured."""
        if not name:
            body = ErrorResponse(error=MISSING_NAME_ERROR)
            return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

        try:
            await create_cluster(name, config, client_factory=client_factory)
        except (ClusterOperationError, OrchestratorError) as e:
            return _error_response(e)

        return StatusResponse(status="Creating")

    @router.delete(
        "/couchdb/{cluster_id}",
        response_model=StatusResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def delete_couchdb_cluster(cluster_id: str):
        """Delete a CouchDB cluster and everything in its namespace."""
        try:
            await delete_cluster(cluster_id, config, client_factory=client_factory)
        except (ClusterOperationError, OrchestratorError) as e:
            return _error_response(e)

        return StatusResponse(status="Deleting")

    return router
