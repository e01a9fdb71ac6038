"""Clone an instance's declared state under a new identity."""

import copy
import logging

from ..instance import Instance, InstanceState

logger = logging.getLogger(__name__)

# A clone owns no cluster resources, so it restarts from the last
# pre-deployment state
_DEPLOYED_STATES = {
    InstanceState.STARTED,
    InstanceState.STOPPED,
    InstanceState.DESTROYED,
}


def _cloned_state(state: InstanceState) -> InstanceState:
    if state in _DEPLOYED_STATES:
        return InstanceState.COMMITTED
    return state


def clone_instance(instance: Instance, suffix: str) -> Instance:
    """
    Create an independent copy of an instance.

    The clone gets name and cluster name with suffix appended. Collections are
    deep-copied so changes on either side do not leak to the other. The
    builder factory is shared. Cached cluster handles are not copied and a
    Started, Stopped or Destroyed source yields a Committed clone: the clone
    has no deployed resources of its own yet.

    Args:
        instance: Instance to copy
        suffix: Appended to name and cluster name (e.g. "-2")

    Returns:
        New Instance
    """
    clone = Instance(
        name=instance.name + suffix,
        instance_type=instance.instance_type,
        builder_factory=instance.builder_factory,
        cluster_name=instance.cluster_name + suffix,
    )
    clone.image_name = instance.image_name
    clone.state = _cloned_state(instance.state)
    clone.ports_tcp = set(instance.ports_tcp)
    clone.ports_udp = set(instance.ports_udp)
    clone.command = list(instance.command)
    clone.args = list(instance.args)
    clone.env = dict(instance.env)
    clone.volumes = copy.deepcopy(instance.volumes)
    clone.memory_request = instance.memory_request
    clone.memory_limit = instance.memory_limit
    clone.cpu_request = instance.cpu_request
    clone.service_account_name = instance.service_account_name

    logger.debug(f"Cloned instance '{instance.cluster_name}' as '{clone.cluster_name}'")
    return clone
