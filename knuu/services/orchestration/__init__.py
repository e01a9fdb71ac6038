"""
Orchestration Module - Cluster resources of test instances

Architecture:
- InstanceOrchestrator: deploys/patches/destroys the Service, StatefulSet
  and PVC of an Instance
- kubernetes: low-level client and manifest helpers

Usage:
    from knuu.services.orchestration import get_instance_orchestrator

    orchestrator = get_instance_orchestrator()
    orchestrator.deploy_volume(instance)
    orchestrator.deploy_pod(instance)
    orchestrator.deploy_service(instance)
"""

from .instance_orchestrator import (
    InstanceOrchestrator,
    get_instance_orchestrator,
    POD_TERMINATION_GRACE_SECONDS,
)

__all__ = [
    "InstanceOrchestrator",
    "get_instance_orchestrator",
    "POD_TERMINATION_GRACE_SECONDS",
]
