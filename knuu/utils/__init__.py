"""Utility modules for naming, ports and resource quantities."""

from .ports import validate_port, is_port_registered, get_free_tcp_port
from .resource_naming import derive_cluster_name, labels_for, get_build_dir

__all__ = [
    'validate_port',
    'is_port_registered',
    'get_free_tcp_port',
    'derive_cluster_name',
    'labels_for',
    'get_build_dir',
]
