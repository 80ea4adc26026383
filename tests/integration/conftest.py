from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import boto3
import pytest
from moto import mock_aws

from fitsnitch_db.runtime import _reset_clients_for_tests


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("DYNAMODB_ENDPOINT", raising=False)


@pytest.fixture
def dynamodb(aws_credentials: None) -> Iterator[Any]:
    _reset_clients_for_tests()
    with mock_aws():
        yield boto3.client("dynamodb", region_name="us-west-2")
    _reset_clients_for_tests()


def _key_schema(primary_key: str, sort_key: str | None) -> list[dict[str, str]]:
    keys = [{"AttributeName": primary_key, "KeyType": "HASH"}]
    if sort_key:
        keys.append({"AttributeName": sort_key, "KeyType": "RANGE"})
    return keys


@pytest.fixture
def users_table(dynamodb: Any) -> str:
    dynamodb.create_table(
        TableName="Users",
        KeySchema=_key_schema("userId", None),
        AttributeDefinitions=[{"AttributeName": "userId", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    return "Users"


@pytest.fixture
def snitches_table(dynamodb: Any) -> str:
    dynamodb.create_table(
        TableName="Snitches",
        KeySchema=_key_schema("userId", "created"),
        AttributeDefinitions=[
            {"AttributeName": "userId", "AttributeType": "S"},
            {"AttributeName": "created", "AttributeType": "N"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    return "Snitches"


@pytest.fixture
def trainers_table(dynamodb: Any) -> str:
    dynamodb.create_table(
        TableName="TrainerClientAssociations",
        KeySchema=_key_schema("trainerId", "clientId"),
        AttributeDefinitions=[
            {"AttributeName": "trainerId", "AttributeType": "S"},
            {"AttributeName": "clientId", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "clientId-trainerId-index",
                "KeySchema": _key_schema("clientId", "trainerId"),
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    return "TrainerClientAssociations"
