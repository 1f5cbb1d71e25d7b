from . import values
from .errors import ShapeError, FieldTypeError


def extract(data):
    if values.kind_of_or_none(data) != values.MAP:
        raise ShapeError("data not an object")

    sql = _get_field(data, "sql", values.STRING, default="")
    params = _get_field(data, "params", values.LIST, default=[])
    return sql, list(params)


def _get_field(data, key, expected_kind, default):
    if key not in data:
        return default

    value = data[key]
    value_kind = values.kind_of_or_none(value)
    if value_kind != expected_kind:
        raise FieldTypeError(key, value_kind or type(value).__name__)
    return value
