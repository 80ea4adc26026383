from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

from .errors import ValidationError

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def record_to_mapping(record: Any) -> dict[str, Any]:
    if is_dataclass(record) and not isinstance(record, type):
        return asdict(record)
    if isinstance(record, Mapping):
        return dict(record)
    raise ValidationError(f"record must be a mapping or dataclass instance, got {type(record).__name__}")


def _to_wire_value(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"non-finite number is not supported: {value!r}")
        return Decimal(repr(value))
    if isinstance(value, Mapping):
        return {str(k): _to_wire_value(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_to_wire_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {_to_wire_value(v) for v in value}
    return value


def _from_wire_value(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        # floats are written via repr, which uses exponent notation from 1e16 up
        exponent = value.as_tuple().exponent
        if isinstance(exponent, int) and exponent <= 0 and value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Binary):
        return bytes(value.value)
    if isinstance(value, dict):
        return {k: _from_wire_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_wire_value(v) for v in value]
    if isinstance(value, set):
        return {_from_wire_value(v) for v in value}
    return value


def marshal_value(value: Any) -> dict[str, Any]:
    try:
        return _serializer.serialize(_to_wire_value(value))
    except (TypeError, ValueError) as err:
        raise ValidationError(f"value cannot be marshalled: {err}") from err


def marshal_item(record: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in record_to_mapping(record).items():
        if value is None:
            continue
        out[str(key)] = marshal_value(value)
    return out


def unmarshal_value(av: Mapping[str, Any]) -> Any:
    return _from_wire_value(_deserializer.deserialize(dict(av)))


def unmarshal_item(item: Mapping[str, Any]) -> dict[str, Any]:
    return {key: unmarshal_value(av) for key, av in item.items()}
