from __future__ import annotations

import functools
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


class _Anything:
    def __eq__(self, other: object) -> bool:
        return True

    def __hash__(self) -> int:
        return 0

    def __repr__(self) -> str:  # pragma: no cover
        return "ANY"


ANY: Any = _Anything()

# index=UNCHECKED skips the IndexName check; index=None requires a base-table request.
UNCHECKED: Any = object()

_OPERATIONS = frozenset({"put_item", "get_item", "delete_item", "query", "scan"})

type RequestCheck = Mapping[str, Any] | Callable[[Mapping[str, Any]], None]


def _first_mismatch(expected: Any, actual: Any, path: str) -> str | None:
    if expected is ANY:
        return None
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return f"{path}: expected dict, got {type(actual).__name__}"
        for key, want in expected.items():
            if key not in actual:
                return f"{path}: missing key {key!r}"
            if problem := _first_mismatch(want, actual[key], f"{path}.{key}"):
                return problem
        return None
    if isinstance(expected, list):
        if not isinstance(actual, list):
            return f"{path}: expected list, got {type(actual).__name__}"
        if len(expected) != len(actual):
            return f"{path}: expected {len(expected)} items, got {len(actual)}"
        for i, pair in enumerate(zip(expected, actual, strict=True)):
            if problem := _first_mismatch(*pair, f"{path}[{i}]"):
                return problem
        return None
    return None if expected == actual else f"{path}: expected {expected!r}, got {actual!r}"


@dataclass(frozen=True)
class ScriptedCall:
    operation: str
    request: RequestCheck | None = None
    table: str | None = None
    index: Any = UNCHECKED
    response: Mapping[str, Any] | None = None
    error: Exception | None = None

    def check(self, operation: str, req: Mapping[str, Any]) -> None:
        if operation != self.operation:
            raise AssertionError(f"expected {self.operation}, got {operation}")
        if self.table is not None and req.get("TableName") != self.table:
            raise AssertionError(f"{operation}: expected table {self.table!r}, got {req.get('TableName')!r}")
        if self.index is not UNCHECKED and req.get("IndexName") != self.index:
            raise AssertionError(f"{operation}: expected index {self.index!r}, got {req.get('IndexName')!r}")

        if callable(self.request):
            self.request(req)
        elif self.request is not None and (problem := _first_mismatch(dict(self.request), req, operation)):
            raise AssertionError(problem)


class FakeDynamoDBClient:
    def __init__(self) -> None:
        self._script: deque[ScriptedCall] = deque()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def expect(
        self,
        operation: str,
        request: RequestCheck | None = None,
        *,
        table: str | None = None,
        index: Any = UNCHECKED,
        response: Mapping[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        if operation not in _OPERATIONS:
            raise ValueError(f"unsupported operation: {operation}")
        self._script.append(ScriptedCall(operation, request, table, index, response, error))

    def assert_no_pending(self) -> None:
        if self._script:
            raise AssertionError(f"pending expected calls: {list(self._script)!r}")

    def __getattr__(self, name: str) -> Any:
        if name not in _OPERATIONS:
            raise AttributeError(name)
        return functools.partial(self._dispatch, name)

    def _dispatch(self, operation: str, **req: Any) -> Mapping[str, Any]:
        self.calls.append((operation, dict(req)))
        if not self._script:
            raise AssertionError(f"unexpected call: {operation}")

        call = self._script.popleft()
        call.check(operation, req)
        if call.error is not None:
            raise call.error
        return dict(call.response or {})
