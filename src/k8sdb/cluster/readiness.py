"""Wait until every replica of a cluster is running."""

import asyncio
import logging
import time

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.orchestrator.client import Instance, OrchestratorClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


class ReadinessTimeoutError(Exception):
    """The cluster did not become ready before the deadline."""

    def __init__(self, namespace: str, timeout: float, observed: list[Instance]) -> None:
        self.namespace = namespace
        self.timeout = timeout
        self.observed = observed
        running = sum(1 for instance in observed if instance.is_running)
        super().__init__(
            f"Cluster {namespace} not ready after {timeout:.1f}s "
            f"({running}/{len(observed)} instances running)"
        )


def is_ready(descriptor: ClusterDescriptor, instances: list[Instance]) -> bool:
    """Check whether a listing shows exactly the declared replicas, all running."""
    if len(instances) != descriptor.replicas:
        logger.debug(
            "Cluster %s: %d/%d replicas created",
            descriptor.namespace,
            len(instances),
            descriptor.replicas,
        )
        return False

    for instance in instances:
        if not instance.is_running:
            logger.debug(
                "Cluster %s: pod %s is %s",
                descriptor.namespace,
                instance.name,
                instance.status,
            )
            return False

    return True


class ReadinessPoller:
    """
    Polls the orchestrator until a cluster's replicas are all running.

    Listing errors propagate on the first occurrence. Without a timeout the
    poller waits forever; pass ``timeout`` to bound the wait.
    """

    def __init__(
        self,
        client: OrchestratorClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float | None = None,
    ):
        """
        Initialize the poller.

        Args:
            client: Orchestrator client used to list instances
            poll_interval: Fixed delay in seconds between two listings
            timeout: Seconds before giving up, None to wait indefinitely
        """
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout

    async def wait_until_ready(self, descriptor: ClusterDescriptor) -> list[Instance]:
        """
        Block until the cluster is ready.

        Args:
            descriptor: Cluster to wait for

        Returns:
            The listing that satisfied the readiness condition

        Raises:
            ReadinessTimeoutError: If a timeout was set and it elapsed first
        """
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        while True:
            instances = await self.client.list_instances(descriptor.namespace)
            if is_ready(descriptor, instances):
                return instances

            if deadline is not None and time.monotonic() >= deadline:
                raise ReadinessTimeoutError(descriptor.namespace, self.timeout, instances)

            await asyncio.sleep(self.poll_interval)
