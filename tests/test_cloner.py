"""Unit tests for instance cloning."""

from unittest.mock import Mock

import pytest

from knuu.instance import Instance, InstanceState, InstanceType
from knuu.services.cloner import clone_instance


@pytest.fixture
def configured_instance(builder):
    instance = Instance("validator", instance_type=InstanceType.EXECUTOR, builder_factory=builder)
    instance.set_image("nginx:1.25")
    instance.set_command("sh", "-c")
    instance.set_args("sleep infinity")
    instance.add_port_tcp(8080)
    instance.add_port_udp(53)
    instance.set_env_variable("NETWORK", "private")
    instance.add_volume("/data", "1Gi")
    instance.set_memory("64Mi", "128Mi")
    instance.set_cpu("100m")
    instance.set_service_account("runner")
    return instance


@pytest.mark.unit
class TestCloneInstance:

    def test_identity_gets_suffix(self, configured_instance):
        clone = clone_instance(configured_instance, "-2")

        assert clone.name == "validator-2"
        assert clone.cluster_name == configured_instance.cluster_name + "-2"

    def test_declared_state_copied(self, configured_instance):
        clone = clone_instance(configured_instance, "-2")

        assert clone.image_name == "nginx:1.25"
        assert clone.state == InstanceState.PREPARING
        assert clone.instance_type == InstanceType.EXECUTOR
        assert clone.command == ["sh", "-c"]
        assert clone.args == ["sleep infinity"]
        assert clone.ports_tcp == {8080}
        assert clone.ports_udp == {53}
        assert clone.env == {"NETWORK": "private"}
        assert clone.volumes == configured_instance.volumes
        assert clone.memory_request == "64Mi"
        assert clone.memory_limit == "128Mi"
        assert clone.cpu_request == "100m"
        assert clone.service_account_name == "runner"

    def test_builder_is_shared(self, configured_instance):
        clone = clone_instance(configured_instance, "-2")

        assert clone.builder_factory is configured_instance.builder_factory

    def test_mutating_clone_does_not_affect_original(self, configured_instance):
        clone = clone_instance(configured_instance, "-2")

        clone.ports_tcp.add(9090)
        clone.command.append("extra")
        clone.env["NETWORK"] = "public"
        clone.add_volume("/logs", "2Gi")

        assert configured_instance.ports_tcp == {8080}
        assert configured_instance.command == ["sh", "-c"]
        assert configured_instance.env == {"NETWORK": "private"}
        assert len(configured_instance.volumes) == 1

    def test_mutating_original_does_not_affect_clone(self, configured_instance):
        clone = clone_instance(configured_instance, "-2")

        configured_instance.ports_udp.add(123)
        configured_instance.args.append("extra")

        assert clone.ports_udp == {53}
        assert clone.args == ["sleep infinity"]

    def test_cluster_handles_reset(self, configured_instance):
        configured_instance.service_handle = Mock()
        configured_instance.workload_handle = Mock()

        clone = clone_instance(configured_instance, "-2")

        assert clone.service_handle is None
        assert clone.workload_handle is None

    def test_clone_with_suffix_method(self, configured_instance):
        clone = configured_instance.clone_with_suffix("-3")

        assert clone.name == "validator-3"
        assert clone.ports_tcp is not configured_instance.ports_tcp

    @pytest.mark.parametrize("state", [
        InstanceState.STARTED,
        InstanceState.STOPPED,
        InstanceState.DESTROYED,
    ])
    def test_clone_of_deployed_instance_is_committed(self, configured_instance, state):
        configured_instance.state = state

        clone = clone_instance(configured_instance, "-2")

        assert clone.state == InstanceState.COMMITTED
        assert configured_instance.state == state

    def test_clone_of_started_instance_is_configurable(self, configured_instance):
        configured_instance.state = InstanceState.STARTED

        clone = clone_instance(configured_instance, "-2")
        clone.add_port_tcp(9090)

        assert clone.ports_tcp == {8080, 9090}
        assert configured_instance.ports_tcp == {8080}
