"""Kubernetes binding of the orchestrator client.

Uses the official ``kubernetes`` Python client. Its calls are blocking, so
each one runs in a worker thread via ``asyncio.to_thread``.

API access is resolved in this order:
1. In-cluster service account (``in_cluster: auto`` or ``always``)
2. Kubeconfig file: explicit ``kubeconfig`` path or the default loading rules
   (KUBECONFIG environment variable, then ~/.kube/config)
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream
from websocket import WebSocketException

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.cluster.manifests import (
    deployment_manifest,
    namespace_manifest,
    service_manifest,
)
from k8sdb.config.schema import KubernetesConfig
from k8sdb.orchestrator.client import (
    CommandExecutionError,
    Instance,
    InstanceStatus,
    OrchestratorError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_EXEC_TIMEOUT = 60


def pod_to_instance(pod: Any) -> Instance:
    """Convert a V1Pod into an Instance."""
    containers = pod.spec.containers if pod.spec and pod.spec.containers else []
    status = pod.status

    return Instance(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        address=(status.pod_ip or "") if status else "",
        status=InstanceStatus.parse(status.phase if status else None),
        container=containers[0].name if containers else "",
    )


class KubernetesClient:
    """Orchestrator client backed by the Kubernetes API."""

    def __init__(self, api_client: Any, exec_timeout: int = DEFAULT_EXEC_TIMEOUT) -> None:
        """
        Initialize the client.

        Args:
            api_client: A configured kubernetes.client.ApiClient
            exec_timeout: Seconds to wait for a command run inside a pod
        """
        self.api_client = api_client
        self.core_v1 = k8s_client.CoreV1Api(api_client)
        self.apps_v1 = k8s_client.AppsV1Api(api_client)
        self.exec_timeout = exec_timeout

    async def _call(self, action: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking API call off the event loop, wrapping its errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ApiException as e:
            msg = f"Failed to {action}: {e.status} {e.reason}"
            raise OrchestratorError(msg) from e
        except urllib3.exceptions.HTTPError as e:
            msg = f"Failed to {action}: {e}"
            raise OrchestratorError(msg) from e

    async def create_namespace(self, namespace: str) -> None:
        await self._call(
            f"create namespace {namespace}",
            self.core_v1.create_namespace,
            body=namespace_manifest(namespace),
        )
        logger.debug("Created namespace %s", namespace)

    async def delete_namespace(self, namespace: str) -> None:
        await self._call(
            f"delete namespace {namespace}",
            self.core_v1.delete_namespace,
            name=namespace,
        )
        logger.debug("Deleted namespace %s", namespace)

    async def create_service(self, descriptor: ClusterDescriptor) -> None:
        await self._call(
            f"create service {descriptor.name} in {descriptor.namespace}",
            self.core_v1.create_namespaced_service,
            namespace=descriptor.namespace,
            body=service_manifest(descriptor),
        )

    async def create_workload(self, descriptor: ClusterDescriptor) -> None:
        await self._call(
            f"create deployment {descriptor.name} in {descriptor.namespace}",
            self.apps_v1.create_namespaced_deployment,
            namespace=descriptor.namespace,
            body=deployment_manifest(descriptor),
        )

    async def list_instances(self, namespace: str) -> list[Instance]:
        pods = await self._call(
            f"list pods in {namespace}",
            self.core_v1.list_namespaced_pod,
            namespace=namespace,
        )
        return [pod_to_instance(pod) for pod in pods.items]

    async def exec(self, instance: Instance, command: Sequence[str]) -> None:
        try:
            await asyncio.to_thread(self._exec_blocking, instance, list(command))
        except CommandExecutionError:
            raise
        except (ApiException, WebSocketException, urllib3.exceptions.HTTPError, OSError) as e:
            raise CommandExecutionError(instance.name, command, str(e)) from e

    def _exec_blocking(self, instance: Instance, command: list[str]) -> None:
        """Run a command in the pod and wait for its exit status."""
        resp = stream(
            self.core_v1.connect_get_namespaced_pod_exec,
            instance.name,
            instance.namespace,
            command=command,
            container=instance.container,
            stderr=True,
            stdin=False,
            stdout=True,
            tty=False,
            _preload_content=False,
        )
        try:
            resp.run_forever(timeout=self.exec_timeout)
            if resp.is_open():
                raise CommandExecutionError(
                    instance.name, command, f"timed out after {self.exec_timeout}s"
                )

            # Parsed from the error channel; empty when the stream closed early
            try:
                returncode = resp.returncode
            except (TypeError, KeyError, ValueError) as e:
                raise CommandExecutionError(instance.name, command, "no exit status reported") from e
            if returncode is None:
                raise CommandExecutionError(instance.name, command, "no exit status reported")
            if returncode != 0:
                stderr = resp.read_stderr().strip()
                raise CommandExecutionError(
                    instance.name, command, f"exit status {returncode}: {stderr}"
                )
        finally:
            resp.close()

    def close(self) -> None:
        """Close the underlying API client connection pool."""
        self.api_client.close()


def _in_cluster_api_client() -> Any:
    configuration = k8s_client.Configuration()
    k8s_config.load_incluster_config(client_configuration=configuration)
    return k8s_client.ApiClient(configuration)


def get_orchestrator_client(settings: KubernetesConfig | None = None) -> KubernetesClient:
    """Build a Kubernetes client from service account or kubeconfig.

    Args:
        settings: Kubernetes access settings (defaults when None).

    Returns:
        A KubernetesClient with its own ApiClient; no global configuration
        is touched.

    Raises:
        OrchestratorError: If no usable configuration is found.
    """
    settings = settings or KubernetesConfig()

    if settings.in_cluster in ("auto", "always"):
        try:
            api_client = _in_cluster_api_client()
            logger.info("Using in-cluster Kubernetes configuration")
            return KubernetesClient(api_client)
        except k8s_config.ConfigException as e:
            if settings.in_cluster == "always":
                msg = f"In-cluster Kubernetes configuration unavailable: {e}"
                raise OrchestratorError(msg) from e
            logger.debug("Not running in a cluster, falling back to kubeconfig")

    try:
        api_client = k8s_config.new_client_from_config(
            config_file=settings.kubeconfig,
            context=settings.context,
        )
    except (k8s_config.ConfigException, OSError) as e:
        msg = (
            "No Kubernetes configuration found. Set KUBECONFIG, create ~/.kube/config "
            f"or set kubernetes.kubeconfig in the k8sdb config: {e}"
        )
        raise OrchestratorError(msg) from e

    logger.info(
        "Using kubeconfig %s (context: %s)",
        settings.kubeconfig or "default",
        settings.context or "current",
    )
    return KubernetesClient(api_client)
