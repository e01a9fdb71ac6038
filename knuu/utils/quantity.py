"""
Kubernetes resource quantity helpers.

Parsing is delegated to kubernetes.utils.parse_quantity; this module only
adds summing and turning a Decimal back into a quantity string.
"""

from decimal import Decimal
from typing import Iterable

from kubernetes.utils import parse_quantity

# Largest suffix first so 3Gi renders as "3Gi" rather than "3072Mi"
_BINARY_SUFFIXES = [
    ("Ei", Decimal(1024) ** 6),
    ("Pi", Decimal(1024) ** 5),
    ("Ti", Decimal(1024) ** 4),
    ("Gi", Decimal(1024) ** 3),
    ("Mi", Decimal(1024) ** 2),
    ("Ki", Decimal(1024)),
]

_DECIMAL_SUFFIXES = [
    ("E", Decimal(10) ** 18),
    ("P", Decimal(10) ** 15),
    ("T", Decimal(10) ** 12),
    ("G", Decimal(10) ** 9),
    ("M", Decimal(10) ** 6),
    ("k", Decimal(10) ** 3),
]


def sum_quantities(quantities: Iterable[str]) -> Decimal:
    """
    Add up quantity strings such as "1Gi" and "500Mi".

    Raises:
        ValueError: If any quantity cannot be parsed
    """
    total = Decimal(0)
    for quantity in quantities:
        total += parse_quantity(quantity)
    return total


def format_quantity(value: Decimal) -> str:
    """
    Render a Decimal as the shortest exact quantity string.

    Examples:
        >>> format_quantity(Decimal(3 * 1024 ** 3))
        "3Gi"
        >>> format_quantity(Decimal(2000))
        "2k"
    """
    if value == 0:
        return "0"
    if value != value.to_integral_value():
        return format(value.normalize(), "f")

    for suffixes in (_BINARY_SUFFIXES, _DECIMAL_SUFFIXES):
        for suffix, factor in suffixes:
            if value % factor == 0:
                return f"{int(value / factor)}{suffix}"
    return str(int(value))
