from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import fields, is_dataclass
from typing import Any, cast

from botocore.exceptions import BotoCoreError, ClientError

from .conditions import (
    ComparisonOp,
    Condition,
    ConditionChain,
    Expression,
    ExpressionBuilder,
    coerce_comparison_op,
    render_condition,
)
from .errors import SchemaError, SchemaMismatchError, ValidationError
from .marshal import marshal_item, marshal_value, unmarshal_item
from .query import Page, PaginationOptions, decode_cursor, encode_cursor
from .runtime import get_dynamodb_client
from .schema import TableSchema
from .store_errors import map_store_error

logger = logging.getLogger(__name__)

type RecordFactory[T] = Callable[[dict[str, Any]], T]


class TableAccessObject[T]:
    def __init__(
        self,
        schema: TableSchema,
        *,
        client: Any | None = None,
        record_type: RecordFactory[T] | type[T] | None = None,
    ) -> None:
        self._schema = schema
        self._client: Any = client if client is not None else get_dynamodb_client()
        self._record_type = record_type

    @property
    def schema(self) -> TableSchema:
        return self._schema

    @property
    def name(self) -> str:
        return self._schema.table_name

    @property
    def primary_key(self) -> str:
        return self._schema.primary_key

    @property
    def sort_key(self) -> str | None:
        return self._schema.sort_key

    @property
    def index(self) -> str | None:
        return self._schema.index_name

    def __repr__(self) -> str:
        target = f"{self.name}/{self.index}" if self.index else self.name
        return f"TableAccessObject({target!r})"

    def bind_index(self, index_schema: TableSchema) -> TableAccessObject[T]:
        if index_schema.table_name != self.name:
            raise SchemaMismatchError(
                f"index must be of the same table: {index_schema.table_name!r} != {self.name!r}"
            )
        if not index_schema.index_name:
            raise SchemaMismatchError("index schema must define an index name")
        return TableAccessObject(index_schema, client=self._client, record_type=self._record_type)

    def create_or_update(self, record: T | Mapping[str, Any]) -> None:
        self._require_writable("create_or_update")
        item = marshal_item(record)
        if self.primary_key not in item:
            raise ValidationError(f"record is missing primary key '{self.primary_key}'")
        if self.sort_key is not None and self.sort_key not in item:
            raise ValidationError(f"record is missing sort key '{self.sort_key}'")

        self._call("put_item", TableName=self.name, Item=item)

    def get_by_primary_key(self, primary_value: Any) -> T | None:
        # Sort-keyed base tables must use query(); the store rejects a partial key.
        if primary_value is None:
            raise ValidationError("primary key value is required")

        if self.index is not None:
            # GetItem cannot target an index: read the first row of the partition.
            builder = ExpressionBuilder()
            expr = builder.build(f"{builder.name(self.primary_key)} = {builder.value(primary_value)}")
            resp = self._call(
                "query",
                TableName=self.name,
                IndexName=self.index,
                KeyConditionExpression=expr.text,
                ExpressionAttributeNames=dict(expr.names),
                ExpressionAttributeValues=self._marshal_values(expr.values),
                Limit=1,
            )
            items = resp.get("Items") or []
            return self._from_item(items[0]) if items else None

        resp = self._call(
            "get_item",
            TableName=self.name,
            Key={self.primary_key: marshal_value(primary_value)},
        )
        item = resp.get("Item")
        if not item:
            return None
        return self._from_item(item)

    def delete_by_keys(self, primary_value: Any, sort_value: Any | None = None) -> None:
        # Returning only means the request was accepted; a missing item is not an error.
        if primary_value is None:
            raise ValidationError("primary key value is required")

        key: dict[str, Any] = {self.primary_key: marshal_value(primary_value)}
        if sort_value is not None:
            if self.sort_key is None:
                raise SchemaError("sort value provided, but table has no sort key")
            key[self.sort_key] = marshal_value(sort_value)
        self._require_writable("delete_by_keys")

        self._call("delete_item", TableName=self.name, Key=key)

    def render_sort_condition(
        self,
        sort_op: ComparisonOp | str | None,
        sort_value1: Any = None,
        sort_value2: Any = None,
        *,
        builder: ExpressionBuilder | None = None,
    ) -> Expression:
        if sort_op is None:
            return Expression()
        if self.sort_key is None:
            raise SchemaError("query attempted to use sort condition but table has no sort key")

        op = coerce_comparison_op(sort_op)
        if op is ComparisonOp.CONTAINS:
            raise ValidationError("CONTAINS is not a valid sort key condition")

        builder = builder or ExpressionBuilder()
        text = render_condition(builder, self.sort_key, op, sort_value1, sort_value2)
        return builder.build(text)

    def query(
        self,
        primary_value: Any,
        sort_op: ComparisonOp | str | None = None,
        sort_value1: Any = None,
        sort_value2: Any = None,
    ) -> list[T]:
        if primary_value is None:
            raise ValidationError("primary key value is required")

        builder = ExpressionBuilder()
        key_expr = f"{builder.name(self.primary_key)} = {builder.value(primary_value)}"
        sort = self.render_sort_condition(sort_op, sort_value1, sort_value2, builder=builder)
        if not sort.is_empty:
            key_expr = f"{key_expr} AND {sort.text}"
        expr = builder.build(key_expr)

        req: dict[str, Any] = {
            "TableName": self.name,
            "KeyConditionExpression": expr.text,
            "ExpressionAttributeNames": dict(expr.names),
            "ExpressionAttributeValues": self._marshal_values(expr.values),
        }
        if self.index is not None:
            req["IndexName"] = self.index

        records: list[T] = []
        while True:
            resp = self._call("query", **req)
            records.extend(self._from_item(item) for item in resp.get("Items") or [])
            last = resp.get("LastEvaluatedKey")
            if not last:
                break
            req["ExclusiveStartKey"] = last
        return records

    def scan(
        self,
        chain: ConditionChain | Condition | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Page[T]:
        pagination = pagination or PaginationOptions()
        if isinstance(chain, Condition):
            chain = ConditionChain.of(chain)

        req: dict[str, Any] = {"TableName": self.name}
        if self.index is not None:
            req["IndexName"] = self.index
        if chain is not None:
            expr = chain.render()
            req["FilterExpression"] = expr.text
            req["ExpressionAttributeNames"] = dict(expr.names)
            req["ExpressionAttributeValues"] = self._marshal_values(expr.values)
        if pagination.page_size is not None:
            # Limit caps evaluated items, so filtered pages can be short while more remain.
            req["Limit"] = pagination.page_size
        if pagination.page_break_key is not None:
            try:
                decoded = decode_cursor(pagination.page_break_key)
            except ValueError as err:
                raise ValidationError("invalid page break key") from err
            if (decoded.table, decoded.index) != (self.name, self.index):
                raise ValidationError("page break key does not belong to this table/index")
            req["ExclusiveStartKey"] = decoded.last_key

        resp = self._call("scan", **req)
        records = [self._from_item(item) for item in resp.get("Items") or []]
        last = resp.get("LastEvaluatedKey")
        return Page(
            records=records,
            page_size=pagination.page_size if pagination.page_size is not None else len(records),
            page_break_key=encode_cursor(last, table=self.name, index=self.index) if last else None,
        )

    def iter_pages(
        self,
        chain: ConditionChain | Condition | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Iterator[Page[T]]:
        pagination = pagination or PaginationOptions()
        while True:
            page = self.scan(chain, pagination)
            yield page
            if page.page_break_key is None:
                return
            pagination = PaginationOptions(page_size=pagination.page_size, page_break_key=page.page_break_key)

    def scan_all(
        self,
        chain: ConditionChain | Condition | None = None,
        *,
        page_size: int | None = None,
    ) -> list[T]:
        out: list[T] = []
        for page in self.iter_pages(chain, PaginationOptions(page_size=page_size)):
            out.extend(page.records)
        return out

    def _require_writable(self, operation: str) -> None:
        if self.index is not None:
            raise SchemaError(f"{operation}: secondary index {self.index!r} is read-only")

    def _marshal_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {ref: marshal_value(value) for ref, value in values.items()}

    def _call(self, operation: str, **req: Any) -> Mapping[str, Any]:
        logger.debug("dynamodb %s table=%s index=%s", operation, self.name, self.index)
        try:
            return getattr(self._client, operation)(**req)
        except (ClientError, BotoCoreError) as err:
            logger.warning("dynamodb %s failed on %s: %s", operation, self.name, err)
            raise map_store_error(err) from err

    def _from_item(self, item: Mapping[str, Any]) -> T:
        data = unmarshal_item(item)
        record_type = self._record_type
        if record_type is None:
            return cast(T, data)

        if isinstance(record_type, type) and is_dataclass(record_type):
            names = {f.name for f in fields(record_type) if f.init}
            try:
                return cast(T, record_type(**{k: v for k, v in data.items() if k in names}))
            except TypeError as err:
                raise ValidationError(str(err)) from err

        return cast(RecordFactory[T], record_type)(data)


def bind_index[T](base: TableAccessObject[T], index_schema: TableSchema) -> TableAccessObject[T]:
    return base.bind_index(index_schema)
