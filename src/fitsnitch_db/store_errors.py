from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

from .errors import StoreError


def map_client_error(err: ClientError) -> StoreError:
    code = str(err.response.get("Error", {}).get("Code", ""))
    message = str(err.response.get("Error", {}).get("Message", ""))
    return StoreError(code=code or "UnknownError", message=message or str(err))


def map_transport_error(err: BotoCoreError) -> StoreError:
    return StoreError(code="TransportError", message=str(err) or type(err).__name__)


def map_store_error(err: ClientError | BotoCoreError) -> StoreError:
    if isinstance(err, ClientError):
        return map_client_error(err)
    return map_transport_error(err)
