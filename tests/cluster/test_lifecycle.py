"""Tests for the cluster lifecycle controller."""

import pytest

from k8sdb.cluster.descriptor import ClusterDescriptor
from k8sdb.cluster.lifecycle import (
    ClusterController,
    ClusterOperationError,
    ClusterState,
    create_cluster,
    delete_cluster,
)
from k8sdb.cluster.readiness import ReadinessPoller
from k8sdb.cluster.replication import BootstrapFailurePolicy, ReplicationConfigurator
from k8sdb.orchestrator.client import OrchestratorError


def _controller(client) -> ClusterController:
    return ClusterController(
        client,
        poller=ReadinessPoller(client, poll_interval=0.001),
        configurator=ReplicationConfigurator(client, settle_delay=0.0),
    )


@pytest.mark.asyncio
async def test_create_demo_cluster(demo_descriptor, running_instances, fake_client_cls):
    """demo/orders with 3 nodes: resources, one listing, 3 bootstraps, 6 triggers."""
    client = fake_client_cls(listings=[running_instances])

    edges = await _controller(client).create(demo_descriptor)

    assert client.methods[:4] == [
        "create_namespace",
        "create_service",
        "create_workload",
        "list_instances",
    ]
    assert client.methods[4:] == ["exec"] * 9
    assert client.calls[0] == ("create_namespace", "demo")
    assert client.calls[1][1] is demo_descriptor
    assert len(edges) == 6
    assert {e.target.address for e in edges} == {"10.0.0.1", "10.0.0.2", "10.0.0.3"}


@pytest.mark.asyncio
async def test_create_polls_until_all_replicas_run(demo_descriptor, instance_factory, fake_client_cls):
    two = [instance_factory(i) for i in (1, 2)]
    three = [instance_factory(i) for i in (1, 2, 3)]
    client = fake_client_cls(listings=[[], two, three])

    await _controller(client).create(demo_descriptor)

    assert client.methods.count("list_instances") == 3
    assert client.methods.index("exec") > client.methods.index("create_workload")


@pytest.mark.asyncio
async def test_create_halts_on_service_failure(demo_descriptor, fake_client_cls, api_error):
    """A service failure prevents workload creation and polling."""
    client = fake_client_cls(failures={"create_service": api_error})

    with pytest.raises(ClusterOperationError) as exc_info:
        await _controller(client).create(demo_descriptor)

    assert client.methods == ["create_namespace", "create_service"]
    assert exc_info.value.state is ClusterState.NAMESPACE_CREATED
    assert exc_info.value.__cause__ is api_error
    assert exc_info.value.namespace == "demo"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("failing", "expected_calls", "expected_state"),
    [
        ("create_namespace", ["create_namespace"], ClusterState.START),
        (
            "create_workload",
            ["create_namespace", "create_service", "create_workload"],
            ClusterState.SERVICE_CREATED,
        ),
        (
            "list_instances",
            ["create_namespace", "create_service", "create_workload", "list_instances"],
            ClusterState.WORKLOAD_CREATED,
        ),
    ],
)
async def test_create_halts_at_first_failing_step(
    demo_descriptor, fake_client_cls, api_error, failing, expected_calls, expected_state
):
    client = fake_client_cls(failures={failing: api_error})

    with pytest.raises(ClusterOperationError) as exc_info:
        await _controller(client).create(demo_descriptor)

    assert client.methods == expected_calls
    assert exc_info.value.state is expected_state


@pytest.mark.asyncio
async def test_create_reports_failed_trigger(demo_descriptor, running_instances, fake_client_cls, exec_error):
    client = fake_client_cls(listings=[running_instances], exec_failures={3: exec_error})

    with pytest.raises(ClusterOperationError) as exc_info:
        await _controller(client).create(demo_descriptor)

    assert exc_info.value.state is ClusterState.INSTANCES_READY
    assert exc_info.value.__cause__ is exec_error
    # No cleanup of what was created
    assert "delete_namespace" not in client.methods


@pytest.mark.asyncio
async def test_delete_issues_single_namespace_deletion(fake_client_cls):
    client = fake_client_cls()

    await _controller(client).delete("demo")

    assert client.calls == [("delete_namespace", "demo")]


@pytest.mark.asyncio
async def test_delete_failure(fake_client_cls, api_error):
    client = fake_client_cls(failures={"delete_namespace": api_error})

    with pytest.raises(ClusterOperationError) as exc_info:
        await _controller(client).delete("demo")

    assert exc_info.value.operation == "delete"
    assert exc_info.value.__cause__ is api_error


def test_from_config(fake_client_cls, default_config):
    default_config.readiness.timeout = 30.0
    default_config.replication.bootstrap_failure_policy = "raise"

    controller = ClusterController.from_config(fake_client_cls(), default_config)

    assert controller.poller.timeout == 30.0
    assert controller.poller.poll_interval == 0.1
    assert controller.configurator.settle_delay == 5.0
    assert controller.configurator.bootstrap_policy is BootstrapFailurePolicy.RAISE


@pytest.mark.asyncio
async def test_create_cluster_uses_namespace_as_database(fast_config, instance_factory, fake_client_cls):
    fast_config.couchdb.replicas = 2
    client = fake_client_cls(listings=[[instance_factory(1), instance_factory(2)]])
    seen_configs = []

    def factory(config):
        seen_configs.append(config)
        return client

    edges = await create_cluster("inventory", fast_config, client_factory=factory)

    assert seen_configs == [fast_config]
    descriptor = client.calls[1][1]
    assert isinstance(descriptor, ClusterDescriptor)
    assert descriptor.database == "inventory"
    assert descriptor.replicas == 2
    assert len(edges) == 2
    assert client.closed


@pytest.mark.asyncio
async def test_delete_cluster_helper(fast_config, fake_client_cls):
    client = fake_client_cls()

    await delete_cluster("inventory", fast_config, client_factory=lambda _config: client)

    assert client.calls == [("delete_namespace", "inventory")]
    assert client.closed


@pytest.mark.asyncio
async def test_create_cluster_closes_client_on_failure(fast_config, fake_client_cls):
    client = fake_client_cls(failures={"create_service": OrchestratorError("409 Conflict")})

    with pytest.raises(ClusterOperationError):
        await create_cluster("inventory", fast_config, client_factory=lambda _config: client)

    assert client.closed


@pytest.mark.asyncio
async def test_delete_cluster_closes_client_on_failure(fast_config, fake_client_cls):
    client = fake_client_cls(failures={"delete_namespace": OrchestratorError("403 Forbidden")})

    with pytest.raises(ClusterOperationError):
        await delete_cluster("inventory", fast_config, client_factory=lambda _config: client)

    assert client.closed
