"""
Create and Delete a CouchDB Cluster
===================================

Creates a three-node CouchDB cluster in namespace ``orders``, waits for the
replication mesh to be configured, prints the replications, then deletes it.

Prerequisites:
- A reachable Kubernetes cluster (KUBECONFIG or ~/.kube/config)
- k8sdb installed: pip install -e .

Usage:
    python examples/create_cluster.py
"""

import asyncio
import logging

from k8sdb.cluster.lifecycle import ClusterOperationError, create_cluster, delete_cluster
from k8sdb.config.loader import load_config


async def main():
    logging.basicConfig(level=logging.INFO)

    config = load_config()
    config.readiness.timeout = 600  # Don't hang forever on a broken image

    try:
        edges = await create_cluster("orders", config)
    except ClusterOperationError as e:
        print(f"Create failed after {e.state.value}: {e.error}")
        await delete_cluster("orders", config)
        return

    for edge in edges:
        print(f"{edge.source.name} ({edge.source.address}) -> {edge.target.address}")

    await delete_cluster("orders", config)


if __name__ == "__main__":
    asyncio.run(main())
