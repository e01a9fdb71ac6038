"""
Test configuration and fixtures for pytest.

Fixtures include: settings, a fixed run context, a KubernetesClient backed by
mocked API objects, and an orchestrator wired to that client.
"""

import sys
from pathlib import Path
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

# Add the repository root to sys.path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    Registers custom markers.
    """
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "kubernetes: mark test as exercising the Kubernetes layer")


@pytest.fixture
def settings():
    """Settings with defaults, independent of the environment."""
    from knuu.config import Settings

    return Settings(
        knuu_namespace="knuu-test",
        image_registry="ttl.sh",
        image_ttl="1h",
        managed_by="knuu",
        _env_file=None,
    )


@pytest.fixture
def run_context():
    """Run context with a fixed start time."""
    from knuu.run_context import RunContext

    return RunContext.create(now=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))


@pytest.fixture
def k8s_client(settings):
    """KubernetesClient whose API objects are mocks."""
    from knuu.services.orchestration.kubernetes.client import KubernetesClient

    return KubernetesClient(
        settings=settings,
        core_v1=MagicMock(),
        apps_v1=MagicMock(),
    )


@pytest.fixture
def orchestrator(k8s_client, run_context, settings):
    """Orchestrator wired to the mocked client."""
    from knuu.services.orchestration import InstanceOrchestrator

    return InstanceOrchestrator(
        k8s_client=k8s_client,
        run_context=run_context,
        settings=settings,
    )


@pytest.fixture
def builder():
    """Mock image builder."""
    from knuu.services.builder import BuilderFactory

    return MagicMock(spec=BuilderFactory)


@pytest.fixture
def instance(builder):
    """A fresh instance with a mock builder."""
    from knuu.instance import Instance

    return Instance("validator", builder_factory=builder)
