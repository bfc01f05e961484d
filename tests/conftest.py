"""Pytest configuration and shared fixtures."""

from collections.abc import Sequence

import pytest

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.config.schema import K8sdbConfig
from k8sdb.orchestrator.client import (
    CommandExecutionError,
    Instance,
    InstanceStatus,
    OrchestratorError,
)


def make_instance(
    index: int,
    namespace: str = "demo",
    status: InstanceStatus = InstanceStatus.RUNNING,
    address: str | None = None,
) -> Instance:
    """Create a pod-like instance at 10.0.0.<index>."""
    return Instance(
        name=f"couchdb-{index}",
        namespace=namespace,
        address=address if address is not None else f"10.0.0.{index}",
        status=status,
        container="couchdb",
    )


class FakeOrchestratorClient:
    """Orchestrator client that records every call in order.

    ``listings`` is consumed one entry per list_instances call; the last
    entry repeats once the queue is exhausted. ``failures`` maps a method
    name to the exception it raises. ``exec_failures`` maps a call index
    (0-based, across all exec calls) to the exception that call raises.
    """

    def __init__(
        self,
        listings: list[list[Instance]] | None = None,
        failures: dict[str, Exception] | None = None,
        exec_failures: dict[int, Exception] | None = None,
    ):
        self.listings = list(listings or [])
        self.failures = failures or {}
        self.exec_failures = exec_failures or {}
        self.calls: list[tuple[str, object]] = []
        self.exec_calls: list[tuple[Instance, list[str]]] = []
        self.closed = False

    def _record(self, method: str, arg: object) -> None:
        self.calls.append((method, arg))
        if method in self.failures:
            raise self.failures[method]

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    async def create_namespace(self, namespace: str) -> None:
        self._record("create_namespace", namespace)

    async def delete_namespace(self, namespace: str) -> None:
        self._record("delete_namespace", namespace)

    async def create_service(self, descriptor: ClusterDescriptor) -> None:
        self._record("create_service", descriptor)

    async def create_workload(self, descriptor: ClusterDescriptor) -> None:
        self._record("create_workload", descriptor)

    async def list_instances(self, namespace: str) -> list[Instance]:
        self._record("list_instances", namespace)
        if not self.listings:
            return []
        if len(self.listings) > 1:
            return self.listings.pop(0)
        return self.listings[0]

    async def exec(self, instance: Instance, command: Sequence[str]) -> None:
        index = len(self.exec_calls)
        self.exec_calls.append((instance, list(command)))
        self._record("exec", instance)
        if index in self.exec_failures:
            raise self.exec_failures[index]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def default_config() -> K8sdbConfig:
    """Provide a default configuration for tests."""
    return K8sdbConfig()


@pytest.fixture
def fast_config() -> K8sdbConfig:
    """Configuration with no settling delay and a tight poll interval."""
    config = K8sdbConfig()
    config.readiness.poll_interval = 0.001
    config.replication.settle_delay = 0.0
    return config


@pytest.fixture
def demo_descriptor() -> ClusterDescriptor:
    """Three-node cluster in namespace 'demo' replicating database 'orders'."""
    return ClusterDescriptor(namespace="demo", replicas=3, database="orders")


@pytest.fixture
def running_instances() -> list[Instance]:
    """Three running instances at 10.0.0.1-3."""
    return [make_instance(i) for i in (1, 2, 3)]


@pytest.fixture
def exec_error() -> CommandExecutionError:
    return CommandExecutionError("couchdb-1", ["curl"], "exit status 7: connection refused")


@pytest.fixture
def api_error() -> OrchestratorError:
    return OrchestratorError("Failed to create service couchdb in demo: 409 Conflict")


@pytest.fixture
def instance_factory():
    """Provide make_instance to tests."""
    return make_instance


@pytest.fixture
def fake_client_cls():
    """Provide the recording fake orchestrator client class."""
    return FakeOrchestratorClient
