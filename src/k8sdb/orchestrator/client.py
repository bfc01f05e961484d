"""Orchestrator client protocol and data types."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from k8sdb.cluster.descriptor import ClusterDescriptor


class OrchestratorError(Exception):
    """An orchestrator API call failed."""


class CommandExecutionError(OrchestratorError):
    """A command run inside an instance failed or exited non-zero."""

    def __init__(self, instance: str, command: Sequence[str], detail: str) -> None:
        self.instance = instance
        self.command = list(command)
        self.detail = detail
        super().__init__(f"Command {' '.join(self.command)!r} failed in {instance}: {detail}")


class InstanceStatus(StrEnum):
    """Pod lifecycle phases as reported by the orchestrator."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, phase: str | None) -> "InstanceStatus":
        """Map a raw phase string to a status, UNKNOWN for anything unexpected."""
        try:
            return cls(phase)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Instance:
    """A live replica of the database workload."""

    name: str  # Pod name
    namespace: str
    address: str  # Pod IP, empty until the pod is scheduled
    status: InstanceStatus
    container: str  # First container of the pod, target of exec

    @property
    def is_running(self) -> bool:
        return self.status == InstanceStatus.RUNNING


class OrchestratorClient(Protocol):
    """Protocol for the orchestrator operations a cluster needs."""

    async def create_namespace(self, namespace: str) -> None:
        """Create the namespace holding every resource of one cluster."""
        ...

    async def delete_namespace(self, namespace: str) -> None:
        """Delete a namespace, cascading to everything created inside it."""
        ...

    async def create_service(self, descriptor: ClusterDescriptor) -> None:
        """Create the network service in front of the cluster."""
        ...

    async def create_workload(self, descriptor: ClusterDescriptor) -> None:
        """Create the replica-set workload running the database."""
        ...

    async def list_instances(self, namespace: str) -> list[Instance]:
        """List every instance currently present in the namespace."""
        ...

    async def exec(self, instance: Instance, command: Sequence[str]) -> None:
        """Run a command inside the instance's primary container.

        Raises:
            CommandExecutionError: If the command could not run or exited non-zero
        """
        ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...
