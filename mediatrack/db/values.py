"""Dynamic value coercion for MediaTrack.

Values read back from the store have no guaranteed shape: integers may come
back as int or float, numbers may have been written as strings, and absent
properties come back as null. This module is the single place where those
shapes are classified and coerced into typed fields; the mapper calls one
function per target field type and nothing else touches raw values.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from neo4j.time import Date as Neo4jDate
from neo4j.time import DateTime as Neo4jDateTime

from mediatrack.errors import DecodeError, ValidationError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ValueKind(str, Enum):
    """Shape of a raw value returned by the store."""

    NULL = "null"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    TEMPORAL = "temporal"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Tag a raw value with its ValueKind.

    bool is a subclass of int in Python but never a number here.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.OTHER
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (Neo4jDateTime, Neo4jDate, datetime, date)):
        return ValueKind.TEMPORAL
    return ValueKind.OTHER


def _fail(field: str, value: Any, expected: str) -> DecodeError:
    return DecodeError(
        f"field {field!r}: cannot decode {type(value).__name__} value {value!r} as {expected}",
        field=field,
    )


# ══════════════════════════════════════════════════════════════════════════════
# STRINGS
# ══════════════════════════════════════════════════════════════════════════════


def optional_str(row: Mapping[str, Any], field: str) -> str | None:
    """Absent, null and empty string all decode to None."""
    value = row.get(field)
    kind = classify(value)
    if kind is ValueKind.NULL:
        return None
    if kind is not ValueKind.STRING:
        raise _fail(field, value, "string")
    return value or None


def required_str(row: Mapping[str, Any], field: str) -> str:
    value = row.get(field)
    if classify(value) is not ValueKind.STRING:
        raise _fail(field, value, "string")
    return value


# ══════════════════════════════════════════════════════════════════════════════
# NUMBERS
# ══════════════════════════════════════════════════════════════════════════════


def _to_int32(field: str, value: Any) -> int:
    kind = classify(value)
    if kind is ValueKind.INT:
        result = value
    elif kind is ValueKind.FLOAT:
        if value != value or value in (float("inf"), float("-inf")):
            raise _fail(field, value, "int32")
        result = int(value)  # truncates toward zero
    elif kind is ValueKind.STRING:
        try:
            result = int(value.strip())
        except ValueError:
            raise _fail(field, value, "int32") from None
    else:
        raise _fail(field, value, "int32")

    if not INT32_MIN <= result <= INT32_MAX:
        raise _fail(field, value, "int32 (out of range)")
    return result


def check_int32(field: str, value: Any, entity: str | None = None) -> None:
    """Reject an outgoing integer that would not read back as int32.

    Write-side counterpart of the int32 decoders: a bad input is a
    ValidationError, while DecodeError stays reserved for stored values.
    """
    if value is None or classify(value) not in (ValueKind.INT, ValueKind.FLOAT):
        return
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValidationError(
            f"field {field!r}: {value} does not fit in int32",
            entity=entity,
            field=field,
        )


def optional_int32(row: Mapping[str, Any], field: str) -> int | None:
    value = row.get(field)
    if value is None:
        return None
    return _to_int32(field, value)


def required_int32(row: Mapping[str, Any], field: str, default: int = 0) -> int:
    """Mandatory integer; a missing value decodes to `default`."""
    value = row.get(field)
    if value is None:
        return default
    return _to_int32(field, value)


def _to_float(field: str, value: Any) -> float:
    kind = classify(value)
    if kind in (ValueKind.INT, ValueKind.FLOAT):
        return float(value)
    raise _fail(field, value, "float")


def optional_float(row: Mapping[str, Any], field: str) -> float | None:
    value = row.get(field)
    if value is None:
        return None
    return _to_float(field, value)


def required_float(row: Mapping[str, Any], field: str) -> float:
    value = row.get(field)
    if value is None:
        raise _fail(field, value, "float")
    return _to_float(field, value)


# ══════════════════════════════════════════════════════════════════════════════
# IDENTIFIERS AND TIMESTAMPS
# ══════════════════════════════════════════════════════════════════════════════


def required_uuid(row: Mapping[str, Any], field: str) -> UUID:
    value = row.get(field)
    if isinstance(value, UUID):
        return value
    if classify(value) is not ValueKind.STRING:
        raise _fail(field, value, "UUID")
    try:
        return UUID(value)
    except ValueError:
        raise _fail(field, value, "UUID") from None


def optional_uuid(row: Mapping[str, Any], field: str) -> UUID | None:
    if row.get(field) in (None, ""):
        return None
    return required_uuid(row, field)


def optional_datetime(row: Mapping[str, Any], field: str) -> datetime | None:
    """Decode a store temporal (or ISO-8601 string) into a native datetime."""
    value = row.get(field)
    kind = classify(value)
    if kind is ValueKind.NULL:
        return None
    if isinstance(value, (Neo4jDateTime, Neo4jDate)):
        value = value.to_native()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if kind is ValueKind.STRING:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            raise _fail(field, value, "datetime") from None
    raise _fail(field, value, "datetime")


def as_param(value: Any) -> Any:
    """Convert a Python value into something the driver can bind as a parameter."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value
