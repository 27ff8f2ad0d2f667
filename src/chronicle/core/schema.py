"""
Column-descriptor contract and history-schema derivation.

* A live table is described by an ordered list of `ColumnDescriptor`s.
* The history schema is those columns (declared order) followed by the
  three fixed ``version_*`` metadata columns.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Mapping, Sequence

import sqlalchemy as sa
from pydantic import BaseModel, ValidationError, field_validator

from ..errors import ConfigurationError

VERSION_ID = "version_id"
VERSION_CREATED_AT = "version_created_at"
VERSION_OPERATION = "version_operation"
METADATA_COLUMN_NAMES = (VERSION_ID, VERSION_CREATED_AT, VERSION_OPERATION)


class StorageClass(str, Enum):
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


_ALIASES: dict[str, StorageClass] = {
    "integer": StorageClass.INTEGER,
    "int": StorageClass.INTEGER,
    "bigint": StorageClass.INTEGER,
    "smallint": StorageClass.INTEGER,
    "boolean": StorageClass.INTEGER,
    "real": StorageClass.REAL,
    "float": StorageClass.REAL,
    "double": StorageClass.REAL,
    "numeric": StorageClass.REAL,
    "text": StorageClass.TEXT,
    "string": StorageClass.TEXT,
    "varchar": StorageClass.TEXT,
    "blob": StorageClass.BLOB,
    "bytes": StorageClass.BLOB,
    "binary": StorageClass.BLOB,
}


def storage_class_for(declared: Any) -> StorageClass:
    """Map a declared type name onto a storage class (unknown ➜ text)."""
    if isinstance(declared, StorageClass):
        return declared
    if not isinstance(declared, str):
        return StorageClass.TEXT
    return _ALIASES.get(declared.strip().lower(), StorageClass.TEXT)


class ColumnDescriptor(BaseModel):
    """One live-table column: its name and semantic storage class."""

    model_config = {"frozen": True}

    name: str
    storage_class: StorageClass = StorageClass.TEXT
    primary_key: bool = False

    @field_validator("storage_class", mode="before")
    @classmethod
    def normalise_storage_class(cls, value: Any) -> StorageClass:
        return storage_class_for(value)


def _coerce(descriptor: ColumnDescriptor | Mapping[str, Any]) -> ColumnDescriptor:
    if isinstance(descriptor, ColumnDescriptor):
        return descriptor
    if not isinstance(descriptor, Mapping) or not descriptor.get("name"):
        raise ConfigurationError(f"Column descriptor without a name: {descriptor!r}")
    try:
        return ColumnDescriptor.model_validate(descriptor)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid column descriptor {descriptor!r}: {exc}") from exc


def introspect(
    descriptors: Iterable[ColumnDescriptor | Mapping[str, Any]],
) -> tuple[ColumnDescriptor, ...]:
    """
    Validate live-column descriptors and return them in declared order.

    Raises `ConfigurationError` for a blank or duplicate name, a name that
    collides with a metadata column, or an empty column list.
    """
    columns: List[ColumnDescriptor] = []
    seen: set[str] = set()
    for raw in descriptors:
        col = _coerce(raw)
        if not col.name.strip():
            raise ConfigurationError(f"Column descriptor without a name: {raw!r}")
        if col.name in METADATA_COLUMN_NAMES:
            raise ConfigurationError(f"Column name {col.name!r} is reserved for version metadata")
        if col.name in seen:
            raise ConfigurationError(f"Duplicate column name {col.name!r}")
        seen.add(col.name)
        columns.append(col)
    if not columns:
        raise ConfigurationError("A versioned table needs at least one column")
    return tuple(columns)


def history_schema(columns: Sequence[ColumnDescriptor]) -> list[tuple[str, StorageClass]]:
    """Ordered ``(name, storage_class)`` pairs of the history relation."""
    schema = [(col.name, col.storage_class) for col in columns]
    schema += [
        (VERSION_ID, StorageClass.INTEGER),
        (VERSION_CREATED_AT, StorageClass.TEXT),
        (VERSION_OPERATION, StorageClass.TEXT),
    ]
    return schema


# ---- SQLAlchemy tables ➜ descriptors -----------------------------------
def _class_of(type_: sa.types.TypeEngine) -> StorageClass:
    if isinstance(type_, (sa.Integer, sa.Boolean)):
        return StorageClass.INTEGER
    if isinstance(type_, (sa.Float, sa.Numeric)):
        return StorageClass.REAL
    if isinstance(type_, sa.LargeBinary):
        return StorageClass.BLOB
    return StorageClass.TEXT


def describe_table(table: sa.Table) -> list[ColumnDescriptor]:
    """Build descriptors from a Core/ORM table definition."""
    return [
        ColumnDescriptor(
            name=col.name,
            storage_class=_class_of(col.type),
            primary_key=col.primary_key,
        )
        for col in table.columns
    ]
