"""
Kubernetes manifest builders for test instances.

Every instance maps to up to three resources, all named after the
instance's cluster name and carrying the same labels:
- Service: exposes the declared TCP/UDP ports, selects the instance's pod
- StatefulSet: one replica running the instance's container
- PersistentVolumeClaim: backs all declared volumes (one claim, summed size)
"""

from kubernetes import client
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from ....instance import Volume

logger = logging.getLogger(__name__)


# =============================================================================
# Service Manifest
# =============================================================================

def create_service_ports(
    ports_tcp: Iterable[int],
    ports_udp: Iterable[int]
) -> List[client.V1ServicePort]:
    """
    Create Service ports for the declared TCP and UDP ports.

    Ports are sorted so the same declared sets always produce the same port list.
    """
    ports = [
        client.V1ServicePort(name=f"tcp-{port}", port=port, target_port=port, protocol="TCP")
        for port in sorted(ports_tcp)
    ]
    ports.extend(
        client.V1ServicePort(name=f"udp-{port}", port=port, target_port=port, protocol="UDP")
        for port in sorted(ports_udp)
    )
    return ports


def create_service_manifest(
    namespace: str,
    name: str,
    labels: Dict[str, str],
    selector: Dict[str, str],
    ports_tcp: Iterable[int],
    ports_udp: Iterable[int]
) -> client.V1Service:
    """
    Create Service manifest for an instance.

    Args:
        namespace: Kubernetes namespace
        name: Instance cluster name
        labels: Resource labels
        selector: Pod selector (the instance labels)
        ports_tcp: Declared TCP ports
        ports_udp: Declared UDP ports

    Returns:
        V1Service manifest
    """
    return client.V1Service(
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(labels)
        ),
        spec=client.V1ServiceSpec(
            selector=dict(selector),
            ports=create_service_ports(ports_tcp, ports_udp),
            type="ClusterIP"
        )
    )


# =============================================================================
# StatefulSet Manifest
# =============================================================================

def create_resource_requirements(
    memory_request: str = "",
    memory_limit: str = "",
    cpu_request: str = ""
) -> client.V1ResourceRequirements:
    """Create container resources, leaving out unset quantities."""
    requests = {}
    limits = {}
    if memory_request:
        requests["memory"] = memory_request
    if cpu_request:
        requests["cpu"] = cpu_request
    if memory_limit:
        limits["memory"] = memory_limit

    return client.V1ResourceRequirements(
        requests=requests or None,
        limits=limits or None
    )


def create_volume_mounts(name: str, volumes: Sequence[Volume]) -> List[client.V1VolumeMount]:
    """
    Mount every declared volume from the instance's single PVC.

    Each volume gets its own sub path on the claim, derived from its mount path.
    """
    return [
        client.V1VolumeMount(
            name=name,
            mount_path=volume.path,
            sub_path=volume.path.lstrip("/")
        )
        for volume in volumes
    ]


def get_volume_owner(volumes: Sequence[Volume]) -> int:
    """
    Get the owner of the instance's volumes, 0 if none is declared.

    All volumes share one PVC and one pod fsGroup, so they must agree on the
    owner. Volumes with owner 0 do not constrain it.

    Raises:
        ValueError: If volumes declare different non-zero owners
    """
    owners = {volume.owner for volume in volumes if volume.owner}
    if len(owners) > 1:
        raise ValueError(f"volumes declare different owners: {sorted(owners)}")
    return owners.pop() if owners else 0


def create_statefulset_manifest(
    namespace: str,
    name: str,
    labels: Dict[str, str],
    image: str,
    command: Sequence[str] = (),
    args: Sequence[str] = (),
    env: Optional[Dict[str, str]] = None,
    volumes: Sequence[Volume] = (),
    memory_request: str = "",
    memory_limit: str = "",
    cpu_request: str = "",
    service_account_name: str = ""
) -> client.V1StatefulSet:
    """
    Create single-replica StatefulSet manifest for an instance.

    Args:
        namespace: Kubernetes namespace
        name: Instance cluster name (StatefulSet, container and claim name)
        labels: Labels for the StatefulSet, its selector and its pods
        image: Container image
        command: Container entrypoint override
        args: Container arguments
        env: Environment variables
        volumes: Declared volumes, mounted from the PVC named after the instance
        memory_request: Memory request quantity
        memory_limit: Memory limit quantity
        cpu_request: CPU request quantity
        service_account_name: Service account the pod runs as

    Returns:
        V1StatefulSet manifest
    """
    container = client.V1Container(
        name=name,
        image=image,
        command=list(command) or None,
        args=list(args) or None,
        env=[client.V1EnvVar(name=key, value=value) for key, value in (env or {}).items()] or None,
        resources=create_resource_requirements(memory_request, memory_limit, cpu_request),
        volume_mounts=create_volume_mounts(name, volumes) or None
    )

    pod_spec = client.V1PodSpec(containers=[container])

    if volumes:
        pod_spec.volumes = [
            client.V1Volume(
                name=name,
                persistent_volume_claim=client.V1PersistentVolumeClaimVolumeSource(
                    claim_name=name
                )
            )
        ]
        owner = get_volume_owner(volumes)
        if owner:
            pod_spec.security_context = client.V1PodSecurityContext(fs_group=owner)

    if service_account_name:
        pod_spec.service_account_name = service_account_name

    return client.V1StatefulSet(
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(labels)
        ),
        spec=client.V1StatefulSetSpec(
            replicas=1,
            service_name=name,
            selector=client.V1LabelSelector(match_labels=dict(labels)),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(labels)),
                spec=pod_spec
            )
        )
    )


# =============================================================================
# PVC Manifest
# =============================================================================

def create_pvc_manifest(
    namespace: str,
    name: str,
    labels: Dict[str, str],
    size: str,
    storage_class: str = "",
    access_mode: str = "ReadWriteOnce"
) -> client.V1PersistentVolumeClaim:
    """
    Create PVC manifest for an instance.

    Args:
        namespace: Kubernetes namespace
        name: Instance cluster name
        labels: Resource labels
        size: Storage request (sum of all declared volumes)
        storage_class: StorageClass to use (default: cluster default)
        access_mode: Access mode (default: ReadWriteOnce)

    Returns:
        V1PersistentVolumeClaim manifest
    """
    return client.V1PersistentVolumeClaim(
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(labels)
        ),
        spec=client.V1PersistentVolumeClaimSpec(
            storage_class_name=storage_class or None,
            access_modes=[access_mode],
            resources=client.V1VolumeResourceRequirements(
                requests={"storage": size}
            )
        )
    )
