"""Cluster lifecycle: create and delete CouchDB clusters."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.cluster.readiness import ReadinessPoller
from k8sdb.cluster.replication import (
    BootstrapFailurePolicy,
    ReplicationConfigurator,
    ReplicationEdge,
)
from k8sdb.orchestrator.client import OrchestratorClient

if TYPE_CHECKING:
    from k8sdb.config.schema import K8sdbConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[["K8sdbConfig"], OrchestratorClient]


class ClusterState(Enum):
    """States a create or delete operation moves through."""

    START = "start"
    NAMESPACE_CREATED = "namespace_created"
    SERVICE_CREATED = "service_created"
    WORKLOAD_CREATED = "workload_created"
    INSTANCES_READY = "instances_ready"
    MESH_CONFIGURED = "mesh_configured"
    DELETED = "deleted"
    FAILED = "failed"  # Carried by ClusterOperationError


class ClusterOperationError(Exception):
    """A create or delete operation failed.

    ``state`` is the last state reached before the failing step; the
    original exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        namespace: str,
        operation: str,
        state: ClusterState,
        error: BaseException,
    ) -> None:
        self.namespace = namespace
        self.operation = operation
        self.state = state
        self.error = error
        super().__init__(f"Failed to {operation} cluster {namespace} after {state.value}: {error}")


class ClusterController:
    """
    Creates and deletes CouchDB clusters through an orchestrator client.

    Create runs namespace -> service -> workload -> readiness -> mesh, one
    step at a time. The first failing step stops the pipeline; resources
    created before it are left in place until an explicit delete.

    Delete removes the namespace, which the orchestrator cascades to
    everything inside it.
    """

    def __init__(
        self,
        client: OrchestratorClient,
        poller: ReadinessPoller | None = None,
        configurator: ReplicationConfigurator | None = None,
    ):
        """
        Initialize the controller.

        Args:
            client: Orchestrator client every step goes through
            poller: Readiness poller (default: unbounded, 100ms interval)
            configurator: Replication configurator (default: 5s settle, ignore bootstrap failures)
        """
        self.client = client
        self.poller = poller or ReadinessPoller(client)
        self.configurator = configurator or ReplicationConfigurator(client)

    @classmethod
    def from_config(cls, client: OrchestratorClient, config: K8sdbConfig) -> ClusterController:
        """Build a controller with polling and replication settings from config."""
        poller = ReadinessPoller(
            client,
            poll_interval=config.readiness.poll_interval,
            timeout=config.readiness.timeout,
        )
        configurator = ReplicationConfigurator(
            client,
            settle_delay=config.replication.settle_delay,
            bootstrap_policy=BootstrapFailurePolicy(config.replication.bootstrap_failure_policy),
        )
        return cls(client, poller=poller, configurator=configurator)

    async def create(self, descriptor: ClusterDescriptor) -> list[ReplicationEdge]:
        """
        Create a cluster and wire its nodes into a replication mesh.

        Args:
            descriptor: Cluster to create

        Returns:
            The replication edges configured

        Raises:
            ClusterOperationError: If any step fails
        """
        namespace = descriptor.namespace
        state = ClusterState.START
        logger.info("Creating cluster %s", namespace)

        async def step(message: str, action: Callable[[], Awaitable[T]]) -> T:
            logger.info("Cluster %s: %s", namespace, message)
            try:
                return await action()
            except Exception as e:
                logger.error("Cluster %s: failed after %s: %s", namespace, state.value, e)
                raise ClusterOperationError(namespace, "create", state, e) from e

        await step("creating namespace", lambda: self.client.create_namespace(namespace))
        state = ClusterState.NAMESPACE_CREATED

        await step("creating service", lambda: self.client.create_service(descriptor))
        state = ClusterState.SERVICE_CREATED

        await step("creating deployment", lambda: self.client.create_workload(descriptor))
        state = ClusterState.WORKLOAD_CREATED

        instances = await step(
            "waiting for cluster participants to be running",
            lambda: self.poller.wait_until_ready(descriptor),
        )
        state = ClusterState.INSTANCES_READY

        edges = await step(
            "configuring replication",
            lambda: self.configurator.configure_mesh(descriptor, instances),
        )
        state = ClusterState.MESH_CONFIGURED

        logger.info(
            "Cluster %s: setup done, %s with %d replications", namespace, state.value, len(edges)
        )
        return edges

    async def delete(self, namespace: str) -> None:
        """
        Delete a cluster by deleting its namespace.

        Raises:
            ClusterOperationError: If the namespace deletion fails
        """
        logger.info("Deleting cluster %s", namespace)
        try:
            await self.client.delete_namespace(namespace)
        except Exception as e:
            logger.error("Cluster %s: delete failed: %s", namespace, e)
            raise ClusterOperationError(namespace, "delete", ClusterState.START, e) from e

        logger.info("Cluster %s: %s", namespace, ClusterState.DELETED.value)


def _default_client_factory(config: K8sdbConfig) -> OrchestratorClient:
    from k8sdb.orchestrator.kubernetes import get_orchestrator_client

    return get_orchestrator_client(config.kubernetes)


async def create_cluster(
    namespace: str,
    config: K8sdbConfig,
    client_factory: ClientFactory | None = None,
) -> list[ReplicationEdge]:
    """Create a cluster named ``namespace`` with settings from ``config``."""
    descriptor = ClusterDescriptor.for_create(namespace, config.couchdb)
    client = (client_factory or _default_client_factory)(config)
    try:
        return await ClusterController.from_config(client, config).create(descriptor)
    finally:
        client.close()


async def delete_cluster(
    namespace: str,
    config: K8sdbConfig,
    client_factory: ClientFactory | None = None,
) -> None:
    """Delete the cluster named ``namespace``."""
    descriptor = ClusterDescriptor.for_delete(namespace)
    client = (client_factory or _default_client_factory)(config)
    try:
        await ClusterController.from_config(client, config).delete(descriptor.namespace)
    finally:
        client.close()

