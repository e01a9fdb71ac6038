"""Unit tests for port validation and free-port discovery."""

import socket

import pytest

from knuu.exceptions import InvalidPortError
from knuu.utils.ports import validate_port, is_port_registered, get_free_tcp_port


@pytest.mark.unit
class TestValidatePort:

    @pytest.mark.parametrize("port", [1, 80, 8080, 65535])
    def test_valid_ports(self, port):
        validate_port(port)

    @pytest.mark.parametrize("port", [0, -1, 65536, 100000])
    def test_out_of_range(self, port):
        with pytest.raises(InvalidPortError):
            validate_port(port)

    @pytest.mark.parametrize("port", ["8080", 80.0, None, True])
    def test_not_an_integer(self, port):
        with pytest.raises(InvalidPortError):
            validate_port(port)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_port(0)


@pytest.mark.unit
class TestIsPortRegistered:

    def test_empty_set(self):
        assert is_port_registered(set(), 8080) is False

    def test_present(self):
        assert is_port_registered({80, 8080}, 8080) is True

    def test_absent(self):
        assert is_port_registered({80, 443}, 8080) is False


@pytest.mark.unit
def test_free_tcp_port_is_released():
    port = get_free_tcp_port()

    assert 1 <= port <= 65535

    # The discovery socket is closed, so the port can be bound again
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("", port))
