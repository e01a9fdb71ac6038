"""
Errors raised while configuring and orchestrating test instances.

Input validation errors (ports, file arguments, state transitions) are raised
directly. Errors coming from a collaborator (cluster API, image builder) are
wrapped in an InstanceResourceError subclass carrying the operation and the
instance's cluster name, with the original exception chained as __cause__.
"""

from typing import Optional


class KnuuError(Exception):
    """Base class for all knuu errors."""
    pass


class IdentityGenerationError(KnuuError):
    """Raised when a random identifier could not be generated."""
    pass


class InvalidPortError(KnuuError, ValueError):
    """Raised when a port number is outside [1, 65535]."""
    pass


class InvalidFileArgsError(KnuuError, ValueError):
    """Raised when a file staging request has missing or malformed arguments."""
    pass


class InvalidStateTransitionError(KnuuError):
    """Raised when an operation is not allowed in the instance's current state."""
    pass


class InstanceResourceError(KnuuError):
    """
    A collaborator failed while operating on one of an instance's resources.

    Attributes:
        operation: Name of the failed operation (e.g. "deploy service")
        cluster_name: Cluster name of the affected instance
    """

    operation = "operate on"

    def __init__(self, cluster_name: str, detail: Optional[str] = None):
        self.cluster_name = cluster_name
        self.detail = detail
        message = f"failed to {self.operation} '{cluster_name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ServiceDeploymentError(InstanceResourceError):
    operation = "deploy service"


class ServicePatchError(InstanceResourceError):
    operation = "patch service"


class ServiceLookupError(InstanceResourceError):
    operation = "get service"


class ServiceDeletionError(InstanceResourceError):
    operation = "delete service"


class PodDeploymentError(InstanceResourceError):
    operation = "deploy pod"


class PodDeletionError(InstanceResourceError):
    operation = "delete pod"


class VolumeDeploymentError(InstanceResourceError):
    operation = "deploy volume"


class VolumeDeletionError(InstanceResourceError):
    operation = "delete volume"


class FileStagingError(InstanceResourceError):
    operation = "stage file for"
