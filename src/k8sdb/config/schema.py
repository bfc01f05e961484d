"""Pydantic models for k8sdb.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class CouchDBConfig(BaseModel):
    """Shape of the CouchDB workload created for every cluster."""

    name: str = Field(
        default="couchdb",
        description="Name of the service and deployment inside the cluster namespace",
    )
    heritage: str = Field(
        default="k8sdb",
        description="Value of the 'heritage' label put on every created resource",
    )
    image: str = Field(default="couchdb:1.6.1", description="CouchDB container image")
    replicas: int = Field(default=3, description="Number of CouchDB nodes per cluster", ge=1)
    port: int = Field(default=5984, description="CouchDB HTTP port", ge=1, le=65535)
    liveness_path: str = Field(
        default="/_stats",
        description="HTTP path probed by the liveness check",
    )
    service_type: Literal["LoadBalancer", "NodePort", "ClusterIP"] = Field(
        default="LoadBalancer",
        description="Kubernetes service type exposing the cluster",
    )


class ReadinessConfig(BaseModel):
    """Readiness polling configuration."""

    poll_interval: float = Field(
        default=0.1,
        description="Seconds between two listings of the cluster pods",
        gt=0.0,
    )
    timeout: float | None = Field(
        default=None,
        description="Give up waiting after this many seconds (None = wait forever)",
        gt=0.0,
    )


class ReplicationConfig(BaseModel):
    """Mesh replication configuration."""

    settle_delay: float = Field(
        default=5.0,
        description="Seconds to wait for pod networking to settle before each phase",
        ge=0.0,
    )
    bootstrap_failure_policy: Literal["ignore", "raise"] = Field(
        default="ignore",
        description="What to do when creating the database on a node fails",
    )


class KubernetesConfig(BaseModel):
    """Kubernetes API access configuration."""

    kubeconfig: str | None = Field(
        default=None,
        description="Path to a kubeconfig file (None = default loading rules)",
    )
    context: str | None = Field(
        default=None,
        description="Kubeconfig context to use (None = current context)",
    )
    in_cluster: Literal["auto", "always", "never"] = Field(
        default="auto",
        description="Use the pod service account: 'auto' tries it before kubeconfig",
    )


class ServerConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=8080, description="Server port", ge=1, le=65535)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )


class K8sdbConfig(BaseModel):
    """Root configuration schema for k8sdb."""

    couchdb: CouchDBConfig = Field(default_factory=CouchDBConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    replication: ReplicationConfig = Field(default_factory=ReplicationConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
