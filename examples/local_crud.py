from __future__ import annotations

import os
import uuid

import boto3

from fitsnitch_db import ComparisonOp, PaginationOptions, TableAccessObject, TableSchema


def _client():
    return boto3.client(
        "dynamodb",
        endpoint_url=os.environ.get("DYNAMODB_ENDPOINT", "http://localhost:8000"),
        region_name=os.environ.get("AWS_REGION", "us-west-2"),
        aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", "dummy"),
        aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", "dummy"),
    )


def main() -> None:
    client = _client()
    table_name = f"Snitches_example_{uuid.uuid4().hex[:12]}"

    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "userId", "KeyType": "HASH"},
            {"AttributeName": "created", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "userId", "AttributeType": "S"},
            {"AttributeName": "created", "AttributeType": "N"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        snitches = TableAccessObject(
            TableSchema(table_name=table_name, primary_key="userId", sort_key="created"),
            client=client,
        )

        for created, restaurant in ((1, "Taco Bell"), (2, "Cafe Rio"), (3, "In-N-Out")):
            snitches.create_or_update({"userId": "u1", "created": created, "restaurant": restaurant})

        print("query BETWEEN 2 AND 3:", snitches.query("u1", ComparisonOp.BETWEEN, 2, 3))

        page = snitches.scan(pagination=PaginationOptions(page_size=2))
        print("first page:", page.records, "more:", page.has_more)

        snitches.delete_by_keys("u1", 1)
        print("after delete:", snitches.query("u1"))
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    main()
