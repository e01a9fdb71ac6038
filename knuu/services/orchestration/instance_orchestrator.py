"""
Instance Orchestrator

Turns the declared state of an Instance into cluster resources and tears
them down again. Each instance owns three independent resources, all named
after its cluster name:

    Service      deploy_service / patch_service / destroy_service
    StatefulSet  deploy_pod / destroy_pod
    PVC          deploy_volume / destroy_volume

Deploy operations look the resource up first and branch on the result
instead of reacting to conflict errors, so calling them again on an already
deployed instance converges rather than fails. Nothing here retries: every
collaborator failure is wrapped with the operation and cluster name and
raised to the caller.
"""

import logging
from typing import Dict, Optional

from ...config import Settings, get_settings
from ...exceptions import (
    InvalidStateTransitionError,
    PodDeletionError,
    PodDeploymentError,
    ServiceDeletionError,
    ServiceDeploymentError,
    ServiceLookupError,
    ServicePatchError,
    VolumeDeletionError,
    VolumeDeploymentError,
)
from ...instance import Instance, InstanceState
from ...run_context import RunContext, get_run_context
from ...utils.quantity import format_quantity, sum_quantities
from ...utils.resource_naming import labels_for
from ..image_resolver import resolve_image
from .kubernetes.client import KubernetesClient, get_k8s_client
from .kubernetes.helpers import (
    create_pvc_manifest,
    create_service_manifest,
    create_statefulset_manifest,
)

logger = logging.getLogger(__name__)

# Pods are killed immediately, without waiting for a graceful shutdown
POD_TERMINATION_GRACE_SECONDS = 0


class InstanceOrchestrator:
    """
    Deploys and destroys the cluster resources of test instances.

    The orchestrator keeps no per-instance state of its own; everything it
    learns about the cluster is cached on the instance. Concurrent operations
    on different instances are safe, concurrent operations on the same
    instance must be serialized by the caller.
    """

    def __init__(
        self,
        k8s_client: Optional[KubernetesClient] = None,
        run_context: Optional[RunContext] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.k8s_client = k8s_client or get_k8s_client()
        self.run_context = run_context or get_run_context()

    def labels_for(self, instance: Instance) -> Dict[str, str]:
        return labels_for(instance, self.run_context, managed_by=self.settings.managed_by)

    # =========================================================================
    # SERVICE
    # =========================================================================

    def deploy_service(self, instance: Instance) -> None:
        """
        Create the instance's Service, or patch it if it already exists.

        Raises:
            ServiceDeploymentError: If the lookup, create or patch fails
        """
        name = instance.cluster_name

        try:
            existing = self.k8s_client.get_service(name)
        except Exception as e:
            raise ServiceDeploymentError(name, f"error getting service: {e}") from e

        if existing is not None:
            logger.debug(f"Service '{name}' already exists, patching it")
            instance.service_handle = existing
            try:
                self.patch_service(instance)
            except (ServiceLookupError, ServicePatchError) as e:
                raise ServiceDeploymentError(name, str(e)) from e
            return

        labels = self.labels_for(instance)
        service = create_service_manifest(
            namespace=self.k8s_client.namespace,
            name=name,
            labels=labels,
            selector=labels,
            ports_tcp=instance.ports_tcp,
            ports_udp=instance.ports_udp
        )

        try:
            instance.service_handle = self.k8s_client.create_service(service)
        except Exception as e:
            raise ServiceDeploymentError(name, str(e)) from e

        logger.debug(f"Started service '{name}'")

    def patch_service(self, instance: Instance) -> None:
        """
        Apply the instance's current labels, selector and ports to its Service.

        The Service must exist; a missing Service is a lookup error.

        Raises:
            ServiceLookupError: If the Service cannot be fetched or does not exist
            ServicePatchError: If the patch fails
        """
        name = instance.cluster_name

        if instance.service_handle is None:
            try:
                existing = self.k8s_client.get_service(name)
            except Exception as e:
                raise ServiceLookupError(name, str(e)) from e
            if existing is None:
                raise ServiceLookupError(name, "service not found")
            instance.service_handle = existing

        labels = self.labels_for(instance)
        service = create_service_manifest(
            namespace=self.k8s_client.namespace,
            name=name,
            labels=labels,
            selector=labels,
            ports_tcp=instance.ports_tcp,
            ports_udp=instance.ports_udp
        )

        try:
            instance.service_handle = self.k8s_client.patch_service(name, service)
        except Exception as e:
            raise ServicePatchError(name, str(e)) from e

        logger.debug(f"Patched service '{name}'")

    def destroy_service(self, instance: Instance) -> None:
        """
        Delete the instance's Service. A missing Service is not an error.

        Raises:
            ServiceDeletionError: If the deletion fails for another reason
        """
        name = instance.cluster_name
        try:
            self.k8s_client.delete_service(name)
        except Exception as e:
            raise ServiceDeletionError(name, str(e)) from e
        instance.service_handle = None
        logger.debug(f"Destroyed service '{name}'")

    # =========================================================================
    # POD (STATEFULSET)
    # =========================================================================

    def deploy_pod(self, instance: Instance) -> None:
        """
        Run the instance as a single-replica StatefulSet.

        An existing StatefulSet with the same name is replaced. The resolved
        image is stored on the instance and the instance moves to Started.

        Raises:
            InvalidStateTransitionError: If the instance cannot be started
            PodDeploymentError: If the image cannot be resolved, volumes declare
                different owners, or the cluster call fails
        """
        name = instance.cluster_name

        if instance.state in (InstanceState.NONE, InstanceState.PREPARING):
            instance.commit()
        if not instance.state.can_transition_to(InstanceState.STARTED):
            raise InvalidStateTransitionError(
                f"cannot deploy pod of instance '{name}' in state '{instance.state}'"
            )

        try:
            instance.image_name = resolve_image(instance, self.settings)
        except Exception as e:
            raise PodDeploymentError(name, f"failed to get image name: {e}") from e

        labels = self.labels_for(instance)
        try:
            stateful_set = create_statefulset_manifest(
                namespace=self.k8s_client.namespace,
                name=name,
                labels=labels,
                image=instance.image_name,
                command=instance.command,
                args=instance.args,
                env=instance.env,
                volumes=instance.volumes,
                memory_request=instance.memory_request,
                memory_limit=instance.memory_limit,
                cpu_request=instance.cpu_request,
                service_account_name=instance.service_account_name
            )
        except ValueError as e:
            raise PodDeploymentError(name, str(e)) from e

        try:
            existing = self.k8s_client.get_stateful_set(name)
            if existing is not None:
                logger.debug(f"StatefulSet '{name}' already exists, replacing it")
                deployed = self.k8s_client.replace_stateful_set(name, stateful_set)
            else:
                deployed = self.k8s_client.create_stateful_set(stateful_set)
        except Exception as e:
            raise PodDeploymentError(name, str(e)) from e

        instance.workload_handle = deployed
        instance.transition_to(InstanceState.STARTED)
        logger.debug(f"Started statefulSet '{name}'")

    def destroy_pod(self, instance: Instance) -> None:
        """
        Delete the instance's StatefulSet without a grace period.

        Only a started instance can be stopped. Errors from the cluster,
        including a StatefulSet that no longer exists, are not suppressed.

        Raises:
            InvalidStateTransitionError: If the instance was never started
            PodDeletionError: If the deletion fails
        """
        name = instance.cluster_name

        if not instance.state.can_transition_to(InstanceState.STOPPED):
            raise InvalidStateTransitionError(
                f"cannot destroy pod of instance '{name}' in state '{instance.state}'"
            )

        try:
            self.k8s_client.delete_stateful_set(
                name,
                grace_period_seconds=POD_TERMINATION_GRACE_SECONDS
            )
        except Exception as e:
            raise PodDeletionError(name, str(e)) from e

        instance.workload_handle = None
        instance.transition_to(InstanceState.STOPPED)
        logger.debug(f"Destroyed statefulSet '{name}'")

    # =========================================================================
    # VOLUME (PVC)
    # =========================================================================

    def deploy_volume(self, instance: Instance) -> None:
        """
        Create one PVC sized to the sum of all declared volumes.

        The claim is not resized by later calls: declaring more volumes and
        deploying again requests a new claim with the larger total.

        Raises:
            VolumeDeploymentError: If no volume is declared, a size is not a
                valid quantity, or the cluster call fails
        """
        name = instance.cluster_name

        if not instance.volumes:
            raise VolumeDeploymentError(name, "no volumes declared")

        try:
            total = sum_quantities(volume.size for volume in instance.volumes)
        except (ValueError, ArithmeticError) as e:
            raise VolumeDeploymentError(name, f"invalid volume size: {e}") from e
        size = format_quantity(total)

        pvc = create_pvc_manifest(
            namespace=self.k8s_client.namespace,
            name=name,
            labels=self.labels_for(instance),
            size=size,
            storage_class=self.settings.storage_class,
            access_mode=self.settings.pvc_access_mode
        )

        try:
            self.k8s_client.create_pvc(pvc)
        except Exception as e:
            raise VolumeDeploymentError(name, str(e)) from e

        logger.debug(f"Deployed persistent volume '{name}' with size '{size}'")

    def destroy_volume(self, instance: Instance) -> None:
        """
        Delete the instance's PVC. A missing PVC is not an error.

        Raises:
            VolumeDeletionError: If the deletion fails for another reason
        """
        name = instance.cluster_name
        try:
            self.k8s_client.delete_pvc(name)
        except Exception as e:
            raise VolumeDeletionError(name, str(e)) from e
        logger.debug(f"Destroyed persistent volume '{name}'")

    # =========================================================================
    # INSTANCE
    # =========================================================================

    def destroy_instance(self, instance: Instance) -> None:
        """
        Tear down every resource of the instance and mark it Destroyed.

        The pod is only deleted when the instance is started and the volume
        only when volumes are declared. The Service is always deleted.
        """
        if instance.state == InstanceState.STARTED:
            self.destroy_pod(instance)
        self.destroy_service(instance)
        if instance.volumes:
            self.destroy_volume(instance)
        instance.transition_to(InstanceState.DESTROYED)
        logger.info(f"Destroyed instance '{instance.cluster_name}'")


# Global instance - lazily initialized
_orchestrator_instance: Optional[InstanceOrchestrator] = None


def get_instance_orchestrator() -> InstanceOrchestrator:
    """Get or create the global orchestrator for this test run."""
    global _orchestrator_instance
    if _orchestrator_instance is None:
        _orchestrator_instance = InstanceOrchestrator()
    return _orchestrator_instance
