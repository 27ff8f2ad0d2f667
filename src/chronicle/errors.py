"""
Exception taxonomy for Chronicle.

Every failure is surfaced synchronously; nothing here is retried.
"""

from __future__ import annotations

from typing import Any


class ChronicleError(Exception):
    """Base class for all Chronicle errors."""


class ConfigurationError(ChronicleError):
    """Malformed column descriptor or unsupported configuration."""


class NotRegisteredError(ChronicleError):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table {table_name!r} is not registered for versioning")


class RecordNotFoundError(ChronicleError):
    def __init__(self, table_name: str, predicate: Any):
        self.table_name = table_name
        self.predicate = predicate
        super().__init__(f"No row in {table_name!r} matches {predicate}")


class AmbiguousRecordError(ChronicleError):
    """Predicate for an update/delete matched more than one live row."""

    def __init__(self, table_name: str, predicate: Any):
        self.table_name = table_name
        self.predicate = predicate
        super().__init__(f"More than one row in {table_name!r} matches {predicate}")


class VersionNotFoundError(ChronicleError):
    def __init__(self, version_id: int):
        self.version_id = version_id
        super().__init__(f"Version {version_id} not found")


class UnknownColumnError(ChronicleError):
    def __init__(self, table_name: str, column: str):
        self.table_name = table_name
        self.column = column
        super().__init__(f"Column {column!r} is not declared on {table_name!r}")


class StorageError(ChronicleError):
    """The database rejected a statement; the enclosing transaction was rolled back."""


class InvalidPredicateError(ChronicleError):
    """Predicate is empty or names a column with something other than a string."""
