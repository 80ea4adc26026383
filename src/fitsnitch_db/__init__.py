from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

from .conditions import (
    ComparisonOp,
    Condition,
    ConditionChain,
    Expression,
    ExpressionBuilder,
    LogicalOperator,
    render_condition,
)
from .errors import (
    FitsnitchDbError,
    SchemaError,
    SchemaMismatchError,
    StoreError,
    ValidationError,
)
from .query import Page, PaginationOptions
from .schema import TableSchema

if TYPE_CHECKING:
    from .marshal import marshal_item, unmarshal_item
    from .runtime import (
        StoreCallMetric,
        StoreSettings,
        create_boto3_config,
        get_dynamodb_client,
        instrument_boto3_client,
        is_lambda_environment,
    )
    from .search import build_search_chain, search_strings, search_users
    from .table import TableAccessObject, bind_index
    from .tables import DB_TABLES, get_table_schema, parse_table_registry


def _read_version() -> str:
    try:
        return version("fitsnitch-db")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _read_version()


def __getattr__(name: str) -> Any:
    if name in {"TableAccessObject", "bind_index"}:
        from . import table

        return getattr(table, name)
    if name in {"marshal_item", "unmarshal_item"}:
        from . import marshal

        return getattr(marshal, name)
    if name in {
        "StoreCallMetric",
        "StoreSettings",
        "create_boto3_config",
        "get_dynamodb_client",
        "instrument_boto3_client",
        "is_lambda_environment",
    }:
        from . import runtime

        return getattr(runtime, name)
    if name in {"build_search_chain", "search_strings", "search_users"}:
        from . import search

        return getattr(search, name)
    if name in {"DB_TABLES", "get_table_schema", "parse_table_registry"}:
        from . import tables

        return getattr(tables, name)
    raise AttributeError(name)


__all__ = [
    "ComparisonOp",
    "Condition",
    "ConditionChain",
    "DB_TABLES",
    "Expression",
    "ExpressionBuilder",
    "FitsnitchDbError",
    "LogicalOperator",
    "Page",
    "PaginationOptions",
    "SchemaError",
    "SchemaMismatchError",
    "StoreCallMetric",
    "StoreError",
    "StoreSettings",
    "TableAccessObject",
    "TableSchema",
    "ValidationError",
    "__version__",
    "bind_index",
    "build_search_chain",
    "create_boto3_config",
    "get_dynamodb_client",
    "get_table_schema",
    "instrument_boto3_client",
    "is_lambda_environment",
    "marshal_item",
    "parse_table_registry",
    "render_condition",
    "search_strings",
    "search_users",
    "unmarshal_item",
]
