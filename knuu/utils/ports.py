"""Port validation and local free-port discovery."""

from typing import Iterable
import logging
import socket

from ..exceptions import InvalidPortError

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535


def validate_port(port: int) -> None:
    """
    Check that a port number is usable.

    Raises:
        InvalidPortError: If port is not an integer in [1, 65535]
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidPortError(f"port number '{port}' is not an integer")
    if port < MIN_PORT or port > MAX_PORT:
        raise InvalidPortError(f"port number '{port}' is out of range")


def is_port_registered(ports: Iterable[int], port: int) -> bool:
    """Return True if port is one of the registered ports."""
    # Instances declare a handful of ports, a linear scan is enough
    for registered in ports:
        if registered == port:
            return True
    return False


def get_free_tcp_port() -> int:
    """
    Get a TCP port that is currently free on this host.

    The socket is closed before returning, so another process may grab the
    port before the caller binds it. Callers must tolerate that.

    Returns:
        Port number assigned by the OS
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("", 0))
        port = sock.getsockname()[1]
    logger.debug(f"Found free TCP port {port}")
    return port
