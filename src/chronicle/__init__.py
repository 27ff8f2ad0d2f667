"""
Public surface for Chronicle.
Importing this module does **not** touch the database; build a
`Chronicle(engine)` during application start-up and register tables on it.
"""

from .config import ChronicleConfig, VersioningStrategy
from .core.record import Equals, Predicate, VersionEvent, VersionOperation, VersionRecord
from .core.registry import TableBinding
from .core.schema import ColumnDescriptor, StorageClass, describe_table
from .errors import (
    AmbiguousRecordError,
    ChronicleError,
    ConfigurationError,
    InvalidPredicateError,
    NotRegisteredError,
    RecordNotFoundError,
    StorageError,
    UnknownColumnError,
    VersionNotFoundError,
)
from .runtime import Chronicle

__all__ = [
    "Chronicle",
    "ChronicleConfig",
    "VersioningStrategy",
    "ColumnDescriptor",
    "StorageClass",
    "describe_table",
    "TableBinding",
    "Predicate",
    "Equals",
    "VersionOperation",
    "VersionRecord",
    "VersionEvent",
    "ChronicleError",
    "ConfigurationError",
    "InvalidPredicateError",
    "NotRegisteredError",
    "RecordNotFoundError",
    "AmbiguousRecordError",
    "VersionNotFoundError",
    "UnknownColumnError",
    "StorageError",
]
