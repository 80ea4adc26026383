from __future__ import annotations

import functools
import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, cast

import boto3
from botocore.config import Config

from .errors import ValidationError

DEFAULT_REGION = "us-west-2"


@dataclass(frozen=True)
class StoreCallMetric:
    service: str
    operation: str
    seconds: float
    ok: bool


@dataclass(frozen=True)
class StoreSettings:
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    connect_timeout: float = 1.0
    read_timeout: float = 3.0
    max_attempts: int = 3

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> StoreSettings:
        region = environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION
        endpoint_url = (environ.get("DYNAMODB_ENDPOINT") or "").strip() or None
        return cls(
            region=region,
            endpoint_url=endpoint_url,
            connect_timeout=_env_float(environ, "FITSNITCH_DB_CONNECT_TIMEOUT", 1.0),
            read_timeout=_env_float(environ, "FITSNITCH_DB_READ_TIMEOUT", 3.0),
            max_attempts=_env_int(environ, "FITSNITCH_DB_MAX_ATTEMPTS", 3),
        )


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as err:
        raise ValidationError(f"{name} must be a number: {raw!r}") from err
    if value <= 0:
        raise ValidationError(f"{name} must be > 0")
    return value


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as err:
        raise ValidationError(f"{name} must be an integer: {raw!r}") from err
    if value < 1:
        raise ValidationError(f"{name} must be >= 1")
    return value


def is_lambda_environment(environ: Mapping[str, str] = os.environ) -> bool:
    return bool(
        environ.get("AWS_LAMBDA_FUNCTION_NAME") or "AWS_Lambda" in (environ.get("AWS_EXECUTION_ENV") or "")
    )


def create_boto3_config(settings: StoreSettings) -> Config:
    return Config(
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries={"max_attempts": settings.max_attempts, "mode": "adaptive"},
    )


class _InstrumentedClient:
    def __init__(self, client: Any, service: str, on_call: Callable[[StoreCallMetric], None]) -> None:
        self._client = client
        self._service = service
        self._on_call = on_call

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._client, name)
        if name.startswith("_") or not callable(attr):
            return attr
        return functools.partial(self._timed, name, attr)

    def _timed(self, operation: str, method: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        start = time.monotonic()
        ok = False
        try:
            result = method(*args, **kwargs)
            ok = True
            return result
        finally:
            self._on_call(
                StoreCallMetric(self._service, operation, time.monotonic() - start, ok),
            )


def instrument_boto3_client(
    client: Any,
    *,
    service: str,
    on_call: Callable[[StoreCallMetric], None],
) -> Any:
    return _InstrumentedClient(client, service, on_call)


_clients: dict[tuple[str, str | None], Any] = {}


def get_dynamodb_client(
    settings: StoreSettings | None = None,
    *,
    session: Any | None = None,
    metrics: Callable[[StoreCallMetric], None] | None = None,
) -> Any:
    settings = settings or StoreSettings.from_env()
    key = (settings.region, settings.endpoint_url)
    existing = _clients.get(key)
    if existing is not None:
        return existing

    sess = session or boto3.session.Session(region_name=settings.region)
    client = cast(Any, sess).client(
        "dynamodb",
        region_name=settings.region,
        endpoint_url=settings.endpoint_url,
        config=create_boto3_config(settings),
    )
    if metrics is not None:
        client = instrument_boto3_client(client, service="dynamodb", on_call=metrics)

    _clients[key] = client
    return client


def _reset_clients_for_tests() -> None:
    _clients.clear()
