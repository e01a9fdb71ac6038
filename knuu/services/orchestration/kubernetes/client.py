"""
Kubernetes Client for Test Instances

This module provides a thin, synchronous interface to the Kubernetes API for
the three resource kinds a test instance uses: Services, StatefulSets and
PersistentVolumeClaims. All calls are scoped to one namespace.

Lookups return None when the resource does not exist. Deleting a missing
Service or PVC is not an error; every other API failure is raised as
kubernetes.client.rest.ApiException for the caller to wrap.
"""

from kubernetes import client, config
from kubernetes.client.rest import ApiException
import logging
from typing import Optional

from ....config import Settings, get_settings

logger = logging.getLogger(__name__)


class KubernetesClient:
    """
    Manages Kubernetes resources for test instances.

    This class provides get/create/patch/delete primitives for Services,
    StatefulSets and PersistentVolumeClaims in the test namespace.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        core_v1: Optional[client.CoreV1Api] = None,
        apps_v1: Optional[client.AppsV1Api] = None
    ):
        """Initialize Kubernetes client with in-cluster or kubeconfig."""
        self.settings = settings or get_settings()

        if core_v1 is None or apps_v1 is None:
            self._load_config()

        # Initialize API clients
        self.core_v1 = core_v1 or client.CoreV1Api()
        self.apps_v1 = apps_v1 or client.AppsV1Api()

        self.namespace = self.settings.knuu_namespace

        logger.info(f"Kubernetes client initialized - Namespace: {self.namespace}")

    @staticmethod
    def _load_config() -> None:
        try:
            # Try in-cluster config first (tests running inside the cluster)
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
        except config.ConfigException:
            try:
                # Fall back to kubeconfig (local test runs)
                config.load_kube_config()
                logger.info("Loaded kubeconfig")
            except config.ConfigException as e:
                logger.error(f"Failed to load Kubernetes config: {e}")
                raise RuntimeError("Cannot load Kubernetes configuration") from e

    # =========================================================================
    # SERVICE MANAGEMENT
    # =========================================================================

    def get_service(self, name: str) -> Optional[client.V1Service]:
        """Get a Service, or None if it does not exist."""
        try:
            return self.core_v1.read_namespaced_service(
                name=name,
                namespace=self.namespace
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def create_service(self, service: client.V1Service) -> client.V1Service:
        """Create a Service."""
        created = self.core_v1.create_namespaced_service(
            namespace=self.namespace,
            body=service
        )
        logger.info(f"[K8S] Created service: {service.metadata.name}")
        return created

    def patch_service(self, name: str, service: client.V1Service) -> client.V1Service:
        """Patch an existing Service."""
        patched = self.core_v1.patch_namespaced_service(
            name=name,
            namespace=self.namespace,
            body=service
        )
        logger.info(f"[K8S] Patched service: {name}")
        return patched

    def delete_service(self, name: str) -> None:
        """Delete a Service. A missing Service is not an error."""
        try:
            self.core_v1.delete_namespaced_service(
                name=name,
                namespace=self.namespace
            )
            logger.info(f"[K8S] Deleted service: {name}")
        except ApiException as e:
            if e.status != 404:
                raise
            logger.debug(f"[K8S] Service {name} already deleted")

    # =========================================================================
    # STATEFULSET LIFECYCLE
    # =========================================================================

    def get_stateful_set(self, name: str) -> Optional[client.V1StatefulSet]:
        """Get a StatefulSet, or None if it does not exist."""
        try:
            return self.apps_v1.read_namespaced_stateful_set(
                name=name,
                namespace=self.namespace
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def create_stateful_set(self, stateful_set: client.V1StatefulSet) -> client.V1StatefulSet:
        """Create a StatefulSet."""
        created = self.apps_v1.create_namespaced_stateful_set(
            namespace=self.namespace,
            body=stateful_set
        )
        logger.info(f"[K8S] Created statefulset: {stateful_set.metadata.name}")
        return created

    def replace_stateful_set(self, name: str, stateful_set: client.V1StatefulSet) -> client.V1StatefulSet:
        """Replace an existing StatefulSet."""
        replaced = self.apps_v1.replace_namespaced_stateful_set(
            name=name,
            namespace=self.namespace,
            body=stateful_set
        )
        logger.info(f"[K8S] Replaced statefulset: {name}")
        return replaced

    def delete_stateful_set(self, name: str, grace_period_seconds: Optional[int] = None) -> None:
        """
        Delete a StatefulSet.

        Unlike Services and PVCs, a missing StatefulSet is reported to the
        caller as an ApiException.
        """
        self.apps_v1.delete_namespaced_stateful_set(
            name=name,
            namespace=self.namespace,
            grace_period_seconds=grace_period_seconds
        )
        logger.info(f"[K8S] Deleted statefulset: {name}")

    # =========================================================================
    # PVC MANAGEMENT
    # =========================================================================

    def create_pvc(self, pvc: client.V1PersistentVolumeClaim) -> client.V1PersistentVolumeClaim:
        """Create a PVC."""
        created = self.core_v1.create_namespaced_persistent_volume_claim(
            namespace=self.namespace,
            body=pvc
        )
        logger.info(f"[K8S] Created PVC: {pvc.metadata.name}")
        return created

    def delete_pvc(self, name: str) -> None:
        """Delete a PVC. A missing PVC is not an error."""
        try:
            self.core_v1.delete_namespaced_persistent_volume_claim(
                name=name,
                namespace=self.namespace
            )
            logger.info(f"[K8S] Deleted PVC: {name}")
        except ApiException as e:
            if e.status != 404:
                raise
            logger.debug(f"[K8S] PVC {name} already deleted")


# Global instance - lazily initialized
_k8s_client_instance: Optional[KubernetesClient] = None


def get_k8s_client() -> KubernetesClient:
    """Get or create the global Kubernetes client instance."""
    global _k8s_client_instance
    if _k8s_client_instance is None:
        _k8s_client_instance = KubernetesClient()
    return _k8s_client_instance
