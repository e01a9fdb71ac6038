"""
Unit tests for the Instance model.

Tests declared-state configuration, port registration and the lifecycle
state machine.
"""

import pytest

from knuu.exceptions import InvalidPortError, InvalidStateTransitionError
from knuu.instance import Instance, InstanceState, InstanceType, Volume


@pytest.mark.unit
class TestInstanceConfiguration:

    def test_new_instance_is_empty(self):
        instance = Instance("validator")

        assert instance.name == "validator"
        assert instance.cluster_name.startswith("validator-")
        assert instance.image_name == ""
        assert instance.state == InstanceState.NONE
        assert instance.instance_type == InstanceType.BASIC
        assert instance.ports_tcp == set()
        assert instance.ports_udp == set()
        assert instance.command == []
        assert instance.env == {}
        assert instance.volumes == []
        assert instance.service_handle is None
        assert instance.workload_handle is None

    def test_cluster_name_is_read_only(self):
        instance = Instance("validator")

        with pytest.raises(AttributeError):
            instance.cluster_name = "other"

    def test_configuration_moves_to_preparing(self):
        instance = Instance("validator")

        instance.set_image("nginx:1.25")

        assert instance.state == InstanceState.PREPARING

    def test_declared_state(self):
        instance = Instance("validator")
        instance.set_command("sh", "-c")
        instance.set_args("sleep infinity")
        instance.set_env_variable("NETWORK", "private")
        instance.add_volume("/data", "1Gi", owner=10001)
        instance.set_memory("64Mi", "128Mi")
        instance.set_cpu("100m")
        instance.set_service_account("runner")

        assert instance.command == ["sh", "-c"]
        assert instance.args == ["sleep infinity"]
        assert instance.env == {"NETWORK": "private"}
        assert instance.volumes == [Volume(path="/data", size="1Gi", owner=10001)]
        assert instance.memory_request == "64Mi"
        assert instance.memory_limit == "128Mi"
        assert instance.cpu_request == "100m"
        assert instance.service_account_name == "runner"

    def test_build_dir(self):
        instance = Instance("validator")

        assert instance.build_dir == f"/tmp/knuu/{instance.cluster_name}"


@pytest.mark.unit
class TestInstancePorts:

    def test_add_ports(self):
        instance = Instance("validator")
        instance.add_port_tcp(8080)
        instance.add_port_udp(53)

        assert instance.is_tcp_port_registered(8080)
        assert not instance.is_tcp_port_registered(53)
        assert instance.is_udp_port_registered(53)
        assert not instance.is_udp_port_registered(8080)

    def test_duplicate_port_is_registered_once(self):
        instance = Instance("validator")
        instance.add_port_tcp(8080)
        instance.add_port_tcp(8080)

        assert instance.ports_tcp == {8080}

    @pytest.mark.parametrize("port", [0, 65536])
    def test_invalid_port_rejected(self, port):
        instance = Instance("validator")

        with pytest.raises(InvalidPortError):
            instance.add_port_tcp(port)
        with pytest.raises(InvalidPortError):
            instance.add_port_udp(port)

        assert instance.ports_tcp == set()
        assert instance.ports_udp == set()


@pytest.mark.unit
class TestInstanceState:

    def test_commit_from_none(self):
        instance = Instance("validator")

        instance.commit()

        assert instance.state == InstanceState.COMMITTED

    @pytest.mark.parametrize("source, target", [
        (InstanceState.NONE, InstanceState.STARTED),
        (InstanceState.PREPARING, InstanceState.STOPPED),
        (InstanceState.COMMITTED, InstanceState.STOPPED),
        (InstanceState.DESTROYED, InstanceState.STARTED),
    ])
    def test_illegal_transitions(self, source, target):
        instance = Instance("validator")
        instance.state = source

        with pytest.raises(InvalidStateTransitionError):
            instance.transition_to(target)

        assert instance.state == source

    @pytest.mark.parametrize("source, target", [
        (InstanceState.COMMITTED, InstanceState.STARTED),
        (InstanceState.STARTED, InstanceState.STARTED),
        (InstanceState.STARTED, InstanceState.STOPPED),
        (InstanceState.STOPPED, InstanceState.STARTED),
        (InstanceState.STOPPED, InstanceState.DESTROYED),
    ])
    def test_legal_transitions(self, source, target):
        instance = Instance("validator")
        instance.state = source

        instance.transition_to(target)

        assert instance.state == target

    @pytest.mark.parametrize("state", [InstanceState.STARTED, InstanceState.DESTROYED])
    def test_configuration_rejected_while_deployed(self, state):
        instance = Instance("validator")
        instance.state = state

        with pytest.raises(InvalidStateTransitionError):
            instance.add_port_tcp(8080)
        with pytest.raises(InvalidStateTransitionError):
            instance.set_env_variable("KEY", "value")

    def test_configuration_allowed_while_stopped(self):
        instance = Instance("validator")
        instance.state = InstanceState.STOPPED

        instance.add_port_tcp(8080)

        assert instance.state == InstanceState.STOPPED
        assert instance.ports_tcp == {8080}

    def test_type_and_state_render_as_values(self):
        assert str(InstanceType.TIMEOUT_HANDLER) == "TimeoutHandlerInstance"
        assert str(InstanceState.STARTED) == "Started"
