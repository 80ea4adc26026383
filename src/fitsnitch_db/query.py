from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .errors import ValidationError


@dataclass(frozen=True)
class PaginationOptions:
    page_size: int | None = None
    page_break_key: str | None = None

    def __post_init__(self) -> None:
        if self.page_size is not None and self.page_size <= 0:
            raise ValidationError("page_size must be > 0")


@dataclass(frozen=True)
class Page[T]:
    records: list[T]
    page_size: int
    page_break_key: str | None = None

    @property
    def has_more(self) -> bool:
        return self.page_break_key is not None


@dataclass(frozen=True)
class Cursor:
    last_key: dict[str, Any]
    table: str | None = None
    index: str | None = None


def _bytes_to_text(value: Any) -> str:
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError("B value must be bytes")
    return base64.b64encode(bytes(value)).decode("ascii")


def _text_to_bytes(value: Any) -> bytes:
    if not isinstance(value, str):
        raise ValueError("B value must be a base64 string")
    return base64.b64decode(value, validate=True)


def _convert_av(av: Any, binary: Callable[[Any], Any]) -> dict[str, Any]:
    # Start keys only ever hold S, N, B, BOOL, NULL and nested L/M values.
    if not isinstance(av, dict) or len(av) != 1:
        raise ValueError("attribute value must be a single-key map")
    [(kind, value)] = av.items()

    match kind:
        case "S" | "N" if isinstance(value, str):
            return {kind: value}
        case "BOOL" if isinstance(value, bool):
            return {kind: value}
        case "NULL" if value is True:
            return {kind: True}
        case "B":
            return {kind: binary(value)}
        case "L" if isinstance(value, list):
            return {kind: [_convert_av(v, binary) for v in value]}
        case "M" if isinstance(value, dict):
            return {kind: _convert_key(value, binary)}
        case "S" | "N" | "BOOL" | "NULL" | "L" | "M":
            raise ValueError(f"malformed {kind} attribute value")
    raise ValueError(f"unsupported attribute value type: {kind}")


def _convert_key(key: dict[str, Any], binary: Callable[[Any], Any]) -> dict[str, Any]:
    return {str(name): _convert_av(key[name], binary) for name in sorted(key)}


def encode_cursor(last_key: Any, *, table: str | None = None, index: str | None = None) -> str:
    if not last_key:
        return ""
    if not isinstance(last_key, dict):
        raise ValueError("last_key must be a map")

    payload: dict[str, Any] = {"lastKey": _convert_key(last_key, _bytes_to_text)}
    if table is not None:
        payload["table"] = table
    if index is not None:
        payload["index"] = index

    data = json.dumps(payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Cursor:
    raw = str(cursor or "").strip()
    if not raw:
        raise ValueError("cursor is empty")

    try:
        data = base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as err:
        raise ValueError("cursor is not valid base64") from err

    parsed = json.loads(data)
    if not isinstance(parsed, dict):
        raise ValueError("cursor must decode to an object")

    last_key = parsed.get("lastKey")
    if not isinstance(last_key, dict) or not last_key:
        raise ValueError("cursor lastKey is invalid")

    table, index = parsed.get("table"), parsed.get("index")
    return Cursor(
        last_key=_convert_key(last_key, _text_to_bytes),
        table=table if isinstance(table, str) else None,
        index=index if isinstance(index, str) else None,
    )
