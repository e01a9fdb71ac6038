"""
Test instance model.

An Instance is the declared state of one test unit: a single-replica
StatefulSet plus an optional Service and PersistentVolumeClaim. Configuration
methods only change the declared state; the InstanceOrchestrator turns it
into cluster resources.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, TYPE_CHECKING
import logging

from kubernetes import client

from .exceptions import InvalidStateTransitionError
from .utils.ports import validate_port, is_port_registered
from .utils.resource_naming import derive_cluster_name, get_build_dir

if TYPE_CHECKING:
    from .services.builder import BuilderFactory

logger = logging.getLogger(__name__)


class InstanceType(str, Enum):
    """Kind of instance. Only used for labeling."""

    BASIC = "BasicInstance"
    EXECUTOR = "ExecutorInstance"
    TIMEOUT_HANDLER = "TimeoutHandlerInstance"

    def __str__(self) -> str:
        return self.value


class InstanceState(str, Enum):
    """
    Lifecycle state of an instance.

    Attributes:
        NONE: Created, nothing declared yet
        PREPARING: Declared state is being built up
        COMMITTED: Declared state is final, ready to deploy
        STARTED: Workload deployed
        STOPPED: Workload deleted, may be started again
        DESTROYED: All resources torn down (terminal)
    """

    NONE = "None"
    PREPARING = "Preparing"
    COMMITTED = "Committed"
    STARTED = "Started"
    STOPPED = "Stopped"
    DESTROYED = "Destroyed"

    def can_transition_to(self, target: "InstanceState") -> bool:
        return target in _TRANSITIONS[self]

    def __str__(self) -> str:
        return self.value


_TRANSITIONS: Dict[InstanceState, Set[InstanceState]] = {
    InstanceState.NONE: {InstanceState.PREPARING, InstanceState.DESTROYED},
    InstanceState.PREPARING: {InstanceState.COMMITTED, InstanceState.DESTROYED},
    InstanceState.COMMITTED: {InstanceState.STARTED, InstanceState.DESTROYED},
    InstanceState.STARTED: {InstanceState.STARTED, InstanceState.STOPPED, InstanceState.DESTROYED},
    InstanceState.STOPPED: {InstanceState.STARTED, InstanceState.DESTROYED},
    InstanceState.DESTROYED: set(),
}

# States in which the declared state may still be changed
_CONFIGURABLE_STATES = {
    InstanceState.NONE,
    InstanceState.PREPARING,
    InstanceState.COMMITTED,
    InstanceState.STOPPED,
}


@dataclass(frozen=True)
class Volume:
    """
    Volume declared by an instance.

    Attributes:
        path: Mount path inside the container
        size: Kubernetes quantity string (e.g. "1Gi")
        owner: UID that must own the mounted files
    """

    path: str
    size: str
    owner: int = 0


class Instance:
    """
    Declared state of a test instance.

    The cluster name is derived once at construction and never changes.
    service_handle and workload_handle cache the last observed cluster
    objects; the cluster remains the source of truth.
    """

    def __init__(
        self,
        name: str,
        instance_type: InstanceType = InstanceType.BASIC,
        builder_factory: Optional["BuilderFactory"] = None,
        cluster_name: Optional[str] = None,
    ):
        self.name = name
        self._cluster_name = cluster_name or derive_cluster_name(name)
        self.image_name = ""
        self.state = InstanceState.NONE
        self.instance_type = instance_type
        self.builder_factory = builder_factory

        self.service_handle: Optional[client.V1Service] = None
        self.workload_handle: Optional[client.V1StatefulSet] = None

        self.ports_tcp: Set[int] = set()
        self.ports_udp: Set[int] = set()
        self.command: List[str] = []
        self.args: List[str] = []
        self.env: Dict[str, str] = {}
        self.volumes: List[Volume] = []
        self.memory_request = ""
        self.memory_limit = ""
        self.cpu_request = ""
        self.service_account_name = ""

    def __repr__(self) -> str:
        return f"Instance(name={self.name!r}, cluster_name={self.cluster_name!r}, state={self.state})"

    @property
    def cluster_name(self) -> str:
        return self._cluster_name

    @property
    def build_dir(self) -> str:
        return get_build_dir(self.cluster_name)

    # =========================================================================
    # STATE
    # =========================================================================

    def transition_to(self, target: InstanceState) -> None:
        """
        Move the instance to another lifecycle state.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.state.can_transition_to(target):
            raise InvalidStateTransitionError(
                f"instance '{self.cluster_name}' cannot go from '{self.state}' to '{target}'"
            )
        logger.debug(f"Set state of instance '{self.cluster_name}' to '{target}'")
        self.state = target

    def commit(self) -> None:
        """Mark the declared state as final."""
        if self.state == InstanceState.NONE:
            self.transition_to(InstanceState.PREPARING)
        self.transition_to(InstanceState.COMMITTED)

    def _ensure_configurable(self, action: str) -> None:
        if self.state not in _CONFIGURABLE_STATES:
            raise InvalidStateTransitionError(
                f"cannot {action} on instance '{self.cluster_name}' in state '{self.state}'"
            )
        if self.state == InstanceState.NONE:
            self.transition_to(InstanceState.PREPARING)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def set_image(self, image: str) -> None:
        self._ensure_configurable("set image")
        self.image_name = image

    def set_command(self, *command: str) -> None:
        self._ensure_configurable("set command")
        self.command = list(command)

    def set_args(self, *args: str) -> None:
        self._ensure_configurable("set args")
        self.args = list(args)

    def add_port_tcp(self, port: int) -> None:
        """
        Register a TCP port.

        Raises:
            InvalidPortError: If port is outside [1, 65535]
        """
        validate_port(port)
        self._ensure_configurable("add TCP port")
        self.ports_tcp.add(port)
        logger.debug(f"Added TCP port '{port}' to instance '{self.name}'")

    def add_port_udp(self, port: int) -> None:
        """
        Register a UDP port.

        Raises:
            InvalidPortError: If port is outside [1, 65535]
        """
        validate_port(port)
        self._ensure_configurable("add UDP port")
        self.ports_udp.add(port)
        logger.debug(f"Added UDP port '{port}' to instance '{self.name}'")

    def is_tcp_port_registered(self, port: int) -> bool:
        return is_port_registered(self.ports_tcp, port)

    def is_udp_port_registered(self, port: int) -> bool:
        return is_port_registered(self.ports_udp, port)

    def set_env_variable(self, key: str, value: str) -> None:
        self._ensure_configurable("set environment variable")
        self.env[key] = value

    def add_volume(self, path: str, size: str, owner: int = 0) -> None:
        self._ensure_configurable("add volume")
        self.volumes.append(Volume(path=path, size=size, owner=owner))
        logger.debug(f"Added volume '{path}' with size '{size}' to instance '{self.name}'")

    def set_memory(self, request: str, limit: str) -> None:
        self._ensure_configurable("set memory")
        self.memory_request = request
        self.memory_limit = limit

    def set_cpu(self, request: str) -> None:
        self._ensure_configurable("set cpu")
        self.cpu_request = request

    def set_service_account(self, service_account_name: str) -> None:
        self._ensure_configurable("set service account")
        self.service_account_name = service_account_name

    def add_file(self, src: str, dest: str, chown: str) -> Path:
        """
        Copy a local file into the build context and register it with the builder.

        Args:
            src: Local file to add
            dest: Absolute path of the file inside the image
            chown: Owner in "user:group" form

        Returns:
            Path of the copy inside the build directory
        """
        from .services.file_staging import copy_to_build_dir, stage_file, validate_file_args

        self._ensure_configurable("add file")
        validate_file_args(src, dest, chown)
        staged = copy_to_build_dir(self, src, dest)
        stage_file(self, src, dest, chown)
        return staged

    def clone_with_suffix(self, suffix: str) -> "Instance":
        from .services.cloner import clone_instance

        return clone_instance(self, suffix)
