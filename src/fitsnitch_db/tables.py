from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from .errors import SchemaError
from .schema import TableSchema

USERS = TableSchema(table_name="Users", primary_key="userId")

TRAINERS = TableSchema(
    table_name="TrainerClientAssociations",
    primary_key="trainerId",
    sort_key="clientId",
)
TRAINERS_INDEX_BY_CLIENTS = TableSchema(
    table_name="TrainerClientAssociations",
    primary_key="clientId",
    sort_key="trainerId",
    index_name="clientId-trainerId-index",
)

TRAINER_REQUESTS = TableSchema(
    table_name="TrainerClientRequests",
    primary_key="trainerId",
    sort_key="clientId",
)
TRAINER_REQUESTS_BY_CLIENT = TableSchema(
    table_name="TrainerClientRequests",
    primary_key="clientId",
    sort_key="trainerId",
    index_name="clientId-trainerId-index",
)

PARTNER = TableSchema(table_name="Partners", primary_key="partnerId1", sort_key="partnerId2")
PARTNER_INDEX = TableSchema(
    table_name="Partners",
    primary_key="partnerId2",
    sort_key="partnerId1",
    index_name="partnerId2-partnerId1-index",
)

PARTNER_REQUESTS = TableSchema(table_name="PartnerRequests", primary_key="requester", sort_key="requestee")
PARTNER_REQUESTS_BY_REQUESTEE = TableSchema(
    table_name="PartnerRequests",
    primary_key="requestee",
    sort_key="requester",
    index_name="requestee-requester-index",
)

SNITCHES = TableSchema(table_name="Snitches", primary_key="userId", sort_key="created")
CHEAT_MEALS = TableSchema(table_name="CheatMeals", primary_key="userId", sort_key="created")

DB_TABLES: Mapping[str, TableSchema] = {
    "USERS": USERS,
    "TRAINERS": TRAINERS,
    "TRAINERS_INDEX_BY_CLIENTS": TRAINERS_INDEX_BY_CLIENTS,
    "TRAINER_REQUESTS": TRAINER_REQUESTS,
    "TRAINER_REQUESTS_BY_CLIENT": TRAINER_REQUESTS_BY_CLIENT,
    "PARTNER": PARTNER,
    "PARTNER_INDEX": PARTNER_INDEX,
    "PARTNER_REQUESTS": PARTNER_REQUESTS,
    "PARTNER_REQUESTS_BY_REQUESTEE": PARTNER_REQUESTS_BY_REQUESTEE,
    "SNITCHES": SNITCHES,
    "CHEAT_MEALS": CHEAT_MEALS,
}

REGISTRY_VERSION = "0.1"


def parse_table_registry(raw: str) -> dict[str, TableSchema]:
    """Load a registry document (YAML or JSON) into schemas keyed by table id.

    The document shape is::

        registry_version: "0.1"
        tables:
          USERS: {table_name: Users, primary_key: userId}
          USERS_BY_EMAIL: {table_name: Users, primary_key: email, index_name: email-index}
    """
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as err:
        raise SchemaError("invalid table registry YAML/JSON") from err

    if not isinstance(parsed, dict):
        raise SchemaError("table registry must be a map/object")

    version = parsed.get("registry_version")
    if version != REGISTRY_VERSION:
        raise SchemaError(f"unsupported registry_version: {version!r}")

    tables = parsed.get("tables")
    if not isinstance(tables, dict) or not tables:
        raise SchemaError("table registry must include tables{}")

    registry: dict[str, TableSchema] = {}
    for table_id, entry in tables.items():
        if not isinstance(table_id, str) or not table_id:
            raise SchemaError(f"table id must be a non-empty string: {table_id!r}")
        if not isinstance(entry, dict):
            raise SchemaError(f"table {table_id}: entry must be a map")
        try:
            registry[table_id] = TableSchema.from_mapping(entry)
        except SchemaError as err:
            raise SchemaError(f"table {table_id}: {err}") from err

    base_names = {schema.table_name for schema in registry.values() if not schema.is_index}
    for table_id, schema in registry.items():
        if schema.is_index and schema.table_name not in base_names:
            raise SchemaError(f"index {table_id} references unknown table: {schema.table_name}")

    return registry


def get_table_schema(registry: Mapping[str, Any], table_id: str) -> TableSchema:
    schema = registry.get(table_id)
    if not isinstance(schema, TableSchema):
        raise SchemaError(f"unknown table id: {table_id}")
    return schema
