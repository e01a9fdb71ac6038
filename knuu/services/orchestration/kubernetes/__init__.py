"""
Kubernetes Module

This module contains all Kubernetes-specific code:
- KubernetesClient: Low-level Kubernetes API interactions
- Manifest helpers for the Service, StatefulSet and PVC of an instance

These are used internally by InstanceOrchestrator.
"""

from .client import KubernetesClient, get_k8s_client
from .helpers import (
    create_service_manifest,
    create_service_ports,
    create_statefulset_manifest,
    create_resource_requirements,
    create_volume_mounts,
    get_volume_owner,
    create_pvc_manifest,
)

__all__ = [
    # Client
    "KubernetesClient",
    "get_k8s_client",
    # Manifest Helpers
    "create_service_manifest",
    "create_service_ports",
    "create_statefulset_manifest",
    "create_resource_requirements",
    "create_volume_mounts",
    "get_volume_owner",
    "create_pvc_manifest",
]
