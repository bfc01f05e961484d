"""Cluster descriptor: everything needed to create or locate one cluster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from k8sdb.config.schema import CouchDBConfig


@dataclass(frozen=True)
class ClusterDescriptor:
    """Immutable configuration for one CouchDB cluster.

    The namespace is the only handle on a cluster: every resource is created
    inside it, the pods are found by listing it and deleting it tears the
    cluster down.
    """

    namespace: str
    name: str = "couchdb"
    heritage: str = "k8sdb"
    replicas: int = 3
    image: str = "couchdb:1.6.1"
    database: str = ""  # Empty only for teardown
    port: int = 5984
    liveness_path: str = "/_stats"
    service_type: str = "LoadBalancer"

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("Cluster namespace must not be empty")
        if self.replicas < 1:
            raise ValueError(f"Replica count must be positive, got {self.replicas}")

    @classmethod
    def for_create(cls, namespace: str, couchdb: CouchDBConfig | None = None) -> ClusterDescriptor:
        """Descriptor for a new cluster; the database is named after the namespace."""
        if couchdb is None:
            return cls(namespace=namespace, database=namespace)

        return cls(
            namespace=namespace,
            name=couchdb.name,
            heritage=couchdb.heritage,
            replicas=couchdb.replicas,
            image=couchdb.image,
            database=namespace,
            port=couchdb.port,
            liveness_path=couchdb.liveness_path,
            service_type=couchdb.service_type,
        )

    @classmethod
    def for_delete(cls, namespace: str) -> ClusterDescriptor:
        """Descriptor that only identifies a cluster for teardown."""
        return cls(namespace=namespace)

    @property
    def labels(self) -> dict[str, str]:
        """Labels put on the service, the deployment and its pods."""
        return {"name": self.name, "heritage": self.heritage}

    @property
    def selector(self) -> dict[str, str]:
        return {"name": self.name}

    def database_url(self, address: str) -> str:
        """URL of the cluster database on the node reachable at ``address``."""
        return f"http://{address}:{self.port}/{self.database}"
