"""Kubernetes manifests for a CouchDB cluster.

Plain dicts in the shape the Kubernetes API accepts as request bodies.
"""

from typing import Any

from k8sdb.cluster.descriptor import ClusterDescriptor


def namespace_manifest(namespace: str) -> dict[str, Any]:
    """Namespace holding every resource of a cluster."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {"name": namespace},
    }


def service_manifest(descriptor: ClusterDescriptor) -> dict[str, Any]:
    """Service exposing the CouchDB port of all replicas."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": descriptor.name,
            "namespace": descriptor.namespace,
            "labels": descriptor.labels,
        },
        "spec": {
            "selector": descriptor.selector,
            "type": descriptor.service_type,
            "ports": [{"port": descriptor.port, "targetPort": descriptor.port}],
        },
    }


def deployment_manifest(descriptor: ClusterDescriptor) -> dict[str, Any]:
    """Deployment running ``descriptor.replicas`` CouchDB pods."""
    container = {
        "name": descriptor.name,
        "image": descriptor.image,
        "ports": [{"containerPort": descriptor.port}],
        "livenessProbe": {
            "httpGet": {"path": descriptor.liveness_path, "port": descriptor.port},
        },
    }

    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": descriptor.name,
            "namespace": descriptor.namespace,
            "labels": descriptor.labels,
        },
        "spec": {
            "replicas": descriptor.replicas,
            "selector": {"matchLabels": descriptor.selector},
            "template": {
                "metadata": {
                    "namespace": descriptor.namespace,
                    "labels": descriptor.labels,
                },
                "spec": {"containers": [container]},
            },
        },
    }
