from __future__ import annotations

from typing import Any

from .conditions import Condition, ConditionChain
from .query import Page, PaginationOptions
from .table import TableAccessObject

SEARCH_ATTRIBUTE = "searchStrings"


def search_strings(firstname: str | None, lastname: str | None) -> str:
    return f"{firstname or ''}_{lastname or ''}".lower()


def with_search_strings(user: dict[str, Any]) -> dict[str, Any]:
    return {**user, SEARCH_ATTRIBUTE: search_strings(user.get("firstname"), user.get("lastname"))}


def build_search_chain(query: str, *, attribute: str = SEARCH_ATTRIBUTE) -> ConditionChain | None:
    tokens = [piece.lower() for piece in query.split()]
    if not tokens:
        return None
    return ConditionChain.all_of(*(Condition.contains(attribute, token) for token in tokens))


def search_users[T](
    users: TableAccessObject[T],
    query: str,
    pagination: PaginationOptions | None = None,
) -> Page[T]:
    # An empty query pages through every user.
    return users.scan(build_search_chain(query), pagination)
