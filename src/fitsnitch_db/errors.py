from __future__ import annotations


class FitsnitchDbError(Exception):
    pass


class SchemaError(FitsnitchDbError):
    pass


class SchemaMismatchError(SchemaError):
    pass


class ValidationError(FitsnitchDbError):
    pass


class StoreError(FitsnitchDbError):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
