"""Full-mesh continuous replication between the nodes of a cluster."""

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from enum import StrEnum

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.orchestrator.client import CommandExecutionError, Instance, OrchestratorClient

logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"
DEFAULT_SETTLE_DELAY = 5.0


class BootstrapFailurePolicy(StrEnum):
    """What to do when creating the database on one node fails.

    IGNORE logs the failure and moves on to the next node. Creating a
    database is an idempotent PUT, and a node that already has it answers
    412 without side effects.
    """

    IGNORE = "ignore"
    RAISE = "raise"


@dataclass
class ReplicationRequest:
    """Body of a CouchDB ``POST /_replicate`` call."""

    source: str
    target: str
    continuous: bool = True

    def to_json(self) -> str:
        return json.dumps(asdict(self))


@dataclass(frozen=True)
class ReplicationEdge:
    """One configured replication, run by ``source`` towards ``target``."""

    source: Instance
    target: Instance


def mesh_pairs(instances: list[Instance]) -> list[tuple[Instance, Instance]]:
    """Every ordered pair of instances whose addresses differ, in listing order."""
    return [
        (source, target)
        for source in instances
        for target in instances
        if source.address != target.address
    ]


def create_database_command(descriptor: ClusterDescriptor) -> list[str]:
    """Command creating the cluster database on the local node."""
    return ["curl", "-X", "PUT", descriptor.database_url(LOOPBACK)]


def replicate_command(descriptor: ClusterDescriptor, target: Instance) -> list[str]:
    """Command making the local node continuously replicate into ``target``."""
    request = ReplicationRequest(
        source=descriptor.database,
        target=descriptor.database_url(target.address),
    )
    return [
        "curl",
        "-v",
        "-X",
        "POST",
        f"http://{LOOPBACK}:{descriptor.port}/_replicate",
        "-d",
        request.to_json(),
        "-H",
        "Content-Type: application/json",
    ]


class ReplicationConfigurator:
    """
    Configures replication among the running nodes of a cluster.

    Two phases, each preceded by a settling delay so pod networking is up
    before commands are issued:

    1. Create the database on every node (see BootstrapFailurePolicy).
    2. For every ordered pair of distinct nodes, tell the source node to
       continuously replicate its database into the target.

    Commands run one at a time. The first failed replication aborts the
    mesh and is raised; edges configured before it stay in place.
    """

    def __init__(
        self,
        client: OrchestratorClient,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        bootstrap_policy: BootstrapFailurePolicy = BootstrapFailurePolicy.IGNORE,
    ):
        self.client = client
        self.settle_delay = settle_delay
        self.bootstrap_policy = BootstrapFailurePolicy(bootstrap_policy)

    async def configure_mesh(
        self,
        descriptor: ClusterDescriptor,
        instances: list[Instance],
    ) -> list[ReplicationEdge]:
        """
        Bootstrap the database everywhere, then configure every mesh edge.

        Args:
            descriptor: Cluster being configured
            instances: Running instances, in orchestrator listing order

        Returns:
            The configured edges, in the order they were applied

        Raises:
            CommandExecutionError: If a replication trigger fails, or a
                bootstrap fails under BootstrapFailurePolicy.RAISE
        """
        await self._settle()
        await self.bootstrap_databases(descriptor, instances)

        await self._settle()
        return await self.configure_replications(descriptor, instances)

    async def bootstrap_databases(
        self,
        descriptor: ClusterDescriptor,
        instances: list[Instance],
    ) -> None:
        """Create the cluster database on every node."""
        command = create_database_command(descriptor)

        for instance in instances:
            try:
                await self.client.exec(instance, command)
            except CommandExecutionError as e:
                if self.bootstrap_policy == BootstrapFailurePolicy.RAISE:
                    raise
                logger.warning(
                    "Cluster %s: creating database %r on %s failed, continuing: %s",
                    descriptor.namespace,
                    descriptor.database,
                    instance.name,
                    e.detail,
                )

    async def configure_replications(
        self,
        descriptor: ClusterDescriptor,
        instances: list[Instance],
    ) -> list[ReplicationEdge]:
        """Trigger one continuous replication per ordered pair of distinct nodes."""
        pairs = mesh_pairs(instances)
        edges: list[ReplicationEdge] = []

        for source, target in pairs:
            logger.debug(
                "Cluster %s: replicating %s -> %s",
                descriptor.namespace,
                source.address,
                target.address,
            )
            try:
                await self.client.exec(source, replicate_command(descriptor, target))
            except CommandExecutionError:
                logger.error(
                    "Cluster %s: replication %s -> %s failed after %d of %d edges",
                    descriptor.namespace,
                    source.address,
                    target.address,
                    len(edges),
                    len(pairs),
                )
                raise
            edges.append(ReplicationEdge(source=source, target=target))

        return edges

    async def _settle(self) -> None:
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
