"""
Resource naming utilities for test instances.

Centralized functions for generating consistent identifiers across:
- Kubernetes resource names (Service, StatefulSet, PVC)
- Resource labels (also used as the Service selector)
- Build staging directories

Cluster names use a random UUID segment to ensure:
- Collision-free names within a test run
- Several instances can share one logical name
"""

from typing import Dict, TYPE_CHECKING
import os
import uuid

from ..exceptions import IdentityGenerationError

if TYPE_CHECKING:
    from ..instance import Instance
    from ..run_context import RunContext

BUILD_DIR_ROOT = "/tmp/knuu"


def derive_cluster_name(logical_name: str) -> str:
    """
    Get the cluster resource name for an instance.

    Args:
        logical_name: User-facing instance name

    Returns:
        Name string: "{logical_name}-{first 8 chars of a random UUID}"

    Raises:
        IdentityGenerationError: If the random source fails

    Example:
        >>> derive_cluster_name("validator")
        "validator-550e8400"
    """
    try:
        random_id = str(uuid.uuid4())
    except (OSError, NotImplementedError) as e:
        raise IdentityGenerationError(f"error generating UUID: {e}") from e
    return f"{logical_name}-{random_id[:8]}"


def labels_for(
    instance: "Instance",
    run_context: "RunContext",
    managed_by: str = "knuu"
) -> Dict[str, str]:
    """
    Get the labels attached to all cluster resources of an instance.

    The same map is used as the Service selector, so every value must stay
    stable for as long as the instance is deployed.

    Args:
        instance: Instance to label
        run_context: Identifiers of the current test run
        managed_by: Value of the managed-by label

    Returns:
        Dict of labels
    """
    return {
        "app": instance.cluster_name,
        "k8s.kubernetes.io/managed-by": managed_by,
        "test-run-id": run_context.identifier,
        "test-started": run_context.start_time,
        "name": instance.name,
        "k8s-name": instance.cluster_name,
        "type": str(instance.instance_type),
    }


def get_build_dir(cluster_name: str) -> str:
    """
    Get the build staging directory of an instance.

    Example:
        >>> get_build_dir("validator-550e8400")
        "/tmp/knuu/validator-550e8400"
    """
    return os.path.join(BUILD_DIR_ROOT, cluster_name)
