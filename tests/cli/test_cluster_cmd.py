"""Tests for CLI cluster commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from k8sdb.cli.cluster_cmd import _async_create, _async_delete, _async_status
from k8sdb.cluster.lifecycle import ClusterOperationError, ClusterState
from k8sdb.config.schema import K8sdbConfig
from k8sdb.orchestrator.client import InstanceStatus, OrchestratorError


@pytest.mark.asyncio
async def test_async_create_success():
    config = K8sdbConfig()
    mock_create = AsyncMock(return_value=[object()] * 6)

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=config),
        patch("k8sdb.cli.cluster_cmd.create_cluster", mock_create),
    ):
        assert await _async_create("demo") is True

    mock_create.assert_awaited_once_with("demo", config)


@pytest.mark.asyncio
async def test_async_create_applies_timeout():
    config = K8sdbConfig()

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=config),
        patch("k8sdb.cli.cluster_cmd.create_cluster", AsyncMock(return_value=[])),
    ):
        await _async_create("demo", timeout=120.0)

    assert config.readiness.timeout == 120.0


@pytest.mark.asyncio
@pytest.mark.parametrize("timeout", [0.0, -5.0])
async def test_async_create_rejects_non_positive_timeout(timeout):
    config = K8sdbConfig()
    mock_create = AsyncMock()

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=config),
        patch("k8sdb.cli.cluster_cmd.create_cluster", mock_create),
    ):
        assert await _async_create("demo", timeout=timeout) is False

    mock_create.assert_not_awaited()
    assert config.readiness.timeout is None


@pytest.mark.asyncio
async def test_async_create_failure():
    error = ClusterOperationError(
        "demo", "create", ClusterState.WORKLOAD_CREATED, OrchestratorError("boom")
    )

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=K8sdbConfig()),
        patch("k8sdb.cli.cluster_cmd.create_cluster", AsyncMock(side_effect=error)),
    ):
        assert await _async_create("demo") is False


@pytest.mark.asyncio
async def test_async_delete():
    mock_delete = AsyncMock()

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=K8sdbConfig()),
        patch("k8sdb.cli.cluster_cmd.delete_cluster", mock_delete),
    ):
        assert await _async_delete("demo") is True

    assert mock_delete.await_args.args[0] == "demo"


@pytest.mark.asyncio
async def test_async_status_lists_instances(instance_factory):
    client = MagicMock()
    client.list_instances = AsyncMock(
        return_value=[
            instance_factory(1),
            instance_factory(2, status=InstanceStatus.PENDING, address=""),
        ]
    )

    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=K8sdbConfig()),
        patch("k8sdb.cli.cluster_cmd.get_orchestrator_client", return_value=client),
    ):
        assert await _async_status("demo") is True

    client.list_instances.assert_awaited_once_with("demo")
    client.close.assert_called_once()


@pytest.mark.asyncio
async def test_async_status_no_kubernetes():
    with (
        patch("k8sdb.cli.cluster_cmd.load_config", return_value=K8sdbConfig()),
        patch(
            "k8sdb.cli.cluster_cmd.get_orchestrator_client",
            side_effect=OrchestratorError("No Kubernetes configuration found"),
        ),
    ):
        assert await _async_status("demo") is False
