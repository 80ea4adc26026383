from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import SchemaError

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
MaxAttributeNameLength = 255


def validate_table_name(name: str) -> None:
    if len(name) < 3 or len(name) > 255:
        raise SchemaError(f"table name length invalid: {name!r}")
    if _NAME_PATTERN.match(name) is None:
        raise SchemaError(f"table name contains invalid characters: {name!r}")


def validate_index_name(name: str | None) -> None:
    if not name:
        return
    if len(name) < 3 or len(name) > 255:
        raise SchemaError(f"index name length invalid: {name!r}")
    if _NAME_PATTERN.match(name) is None:
        raise SchemaError(f"index name contains invalid characters: {name!r}")


def validate_key_attribute(name: str, *, role: str) -> None:
    if not name:
        raise SchemaError(f"{role} attribute name cannot be empty")
    if len(name) > MaxAttributeNameLength:
        raise SchemaError(f"{role} attribute name too long")
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in name):
        raise SchemaError(f"{role} attribute name contains control characters")


@dataclass(frozen=True)
class TableSchema:
    # With index_name set, primary_key/sort_key are the index's own key attributes.
    table_name: str
    primary_key: str
    sort_key: str | None = None
    index_name: str | None = None

    def __post_init__(self) -> None:
        validate_table_name(self.table_name)
        validate_key_attribute(self.primary_key, role="primary key")
        if self.sort_key is not None:
            validate_key_attribute(self.sort_key, role="sort key")
            if self.sort_key == self.primary_key:
                raise SchemaError("sort key must differ from primary key")
        validate_index_name(self.index_name)

    @property
    def is_index(self) -> bool:
        return bool(self.index_name)

    @property
    def key_attributes(self) -> tuple[str, ...]:
        if self.sort_key is None:
            return (self.primary_key,)
        return (self.primary_key, self.sort_key)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TableSchema:
        table_name = raw.get("table_name")
        primary_key = raw.get("primary_key")
        sort_key = raw.get("sort_key")
        index_name = raw.get("index_name")

        if not isinstance(table_name, str):
            raise SchemaError("table_name must be a string")
        if not isinstance(primary_key, str):
            raise SchemaError("primary_key must be a string")
        if sort_key is not None and not isinstance(sort_key, str):
            raise SchemaError("sort_key must be a string")
        if index_name is not None and not isinstance(index_name, str):
            raise SchemaError("index_name must be a string")

        unknown = set(raw.keys()) - {"table_name", "primary_key", "sort_key", "index_name"}
        if unknown:
            raise SchemaError(f"unknown schema fields: {sorted(unknown)}")

        return cls(
            table_name=table_name,
            primary_key=primary_key,
            sort_key=sort_key,
            index_name=index_name or None,
        )
