"""
knuu - ephemeral test instances on Kubernetes.

Usage:
    from knuu import Instance, InstanceOrchestrator, configure_logging

    configure_logging()

    instance = Instance("validator")
    instance.set_image("nginx:1.25")
    instance.add_port_tcp(8080)

    orchestrator = InstanceOrchestrator()
    orchestrator.deploy_pod(instance)
    orchestrator.deploy_service(instance)
"""

from .config import configure_logging, get_settings
from .instance import Instance, InstanceState, InstanceType, Volume
from .run_context import RunContext, get_run_context
from .services.orchestration import InstanceOrchestrator, get_instance_orchestrator

__all__ = [
    "Instance",
    "InstanceState",
    "InstanceType",
    "Volume",
    "RunContext",
    "get_run_context",
    "InstanceOrchestrator",
    "get_instance_orchestrator",
    "configure_logging",
    "get_settings",
]
