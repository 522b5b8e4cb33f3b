from __future__ import annotations

# tinker_backend/errors.py


class StorageError(Exception):
    """Base class for every failure raised by the storage layer."""

    def __init__(self, message: str, sql: str | None = None):
        super().__init__(message)
        self.message = message
        self.sql = sql


class DBConnectionError(StorageError):
    """Database directory could not be created or the file could not be opened."""


class SchemaError(StorageError):
    pass


class QueryError(StorageError):
    pass


class StatementError(StorageError):
    pass


class ConstraintViolation(StatementError):
    """UNIQUE / FOREIGN KEY / NOT NULL rejected the statement."""


class UpsertError(StorageError):
    def __init__(self, message: str, user_id: str):
        super().__init__(message)
        self.user_id = user_id
