from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from botocore.exceptions import ClientError

from .marshal import marshal_item
from .mocks import ANY, FakeDynamoDBClient


def client_error(code: str, message: str = "", *, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def wire_items(records: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [marshal_item(record) for record in records]


__all__ = [
    "ANY",
    "FakeDynamoDBClient",
    "client_error",
    "wire_items",
]
