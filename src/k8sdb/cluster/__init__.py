"""CouchDB cluster lifecycle: descriptor, readiness, replication mesh."""

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.cluster.lifecycle import (
    ClusterController,
    ClusterOperationError,
    ClusterState,
    create_cluster,
    delete_cluster,
)
from k8sdb.cluster.readiness import ReadinessPoller, ReadinessTimeoutError
from k8sdb.cluster.replication import (
    BootstrapFailurePolicy,
    ReplicationConfigurator,
    ReplicationEdge,
    ReplicationRequest,
)

__all__ = [
    "BootstrapFailurePolicy",
    "ClusterController",
    "ClusterDescriptor",
    "ClusterOperationError",
    "ClusterState",
    "ReadinessPoller",
    "ReadinessTimeoutError",
    "ReplicationConfigurator",
    "ReplicationEdge",
    "ReplicationRequest",
    "create_cluster",
    "delete_cluster",
]
