"""k8sdb - CouchDB clusters on Kubernetes.

k8sdb creates a replicated CouchDB deployment inside its own namespace, waits
for every replica to come up, then wires the replicas into a full mesh of
continuous replications. Deleting the namespace tears the whole cluster down.

Key modules:

- :mod:`k8sdb.cluster` - Cluster descriptor, readiness polling, mesh replication, lifecycle
- :mod:`k8sdb.orchestrator` - Orchestrator client protocol and its Kubernetes binding
- :mod:`k8sdb.config` - YAML configuration validated with pydantic
- :mod:`k8sdb.server` - HTTP front-end (create/delete endpoints)
- :mod:`k8sdb.cli` - Command-line interface
"""

__version__ = "0.1.0"
