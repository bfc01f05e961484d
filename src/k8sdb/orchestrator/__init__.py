"""Orchestrator access: the client protocol and its Kubernetes binding."""

from k8sdb.orchestrator.client import (
    CommandExecutionError,
    Instance,
    InstanceStatus,
    OrchestratorClient,
    OrchestratorError,
)

__all__ = [
    "CommandExecutionError",
    "Instance",
    "InstanceStatus",
    "OrchestratorClient",
    "OrchestratorError",
]
