"""
Generic JSON-compatible values shared by inbound parameters and outbound rows.

A dynamic value is one of: None, bool, int or float, str, list, or a dict
with string keys. Integers and floats are kept apart all the way through,
so an INTEGER column comes back as ``42`` and a REAL column as ``42.0``.
"""

import base64

from .errors import UnsupportedValueError


NULL = "null"
BOOLEAN = "boolean"
NUMBER = "number"
STRING = "string"
LIST = "list"
MAP = "map"


def kind_of(value):
    if value is None:
        return NULL
    # bool is a subclass of int, so it has to be checked first
    elif isinstance(value, bool):
        return BOOLEAN
    elif isinstance(value, (int, float)):
        return NUMBER
    elif isinstance(value, str):
        return STRING
    elif isinstance(value, (list, tuple)):
        return LIST
    elif isinstance(value, dict):
        return MAP
    else:
        raise UnsupportedValueError(
            "unsupported value of type {0}".format(type(value).__name__)
        )


def kind_of_or_none(value):
    try:
        return kind_of(value)
    except UnsupportedValueError:
        return None


def from_column(value):
    """Box a value read from a SQLite column into a dynamic value."""
    if value is None or isinstance(value, (int, float, str)):
        return value
    elif isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    else:
        raise UnsupportedValueError(
            "unsupported column value of type {0}".format(type(value).__name__)
        )
