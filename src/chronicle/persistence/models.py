"""
SQLAlchemy tables for one binding: the live relation and its history twin.

Live tables are only *described* here (never created); history tables are
created on demand by the registry.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import Column, DateTime, Enum, Float, Integer, LargeBinary, MetaData, Table, Text, text

from ..core.record import VersionOperation
from ..core.schema import (
    VERSION_CREATED_AT,
    VERSION_ID,
    VERSION_OPERATION,
    ColumnDescriptor,
    StorageClass,
)

SQL_TYPES = {
    StorageClass.INTEGER: Integer,
    StorageClass.REAL: Float,
    StorageClass.TEXT: Text,
    StorageClass.BLOB: LargeBinary,
}


def live_table(metadata: MetaData, name: str, columns: Sequence[ColumnDescriptor]) -> Table:
    return Table(
        name,
        metadata,
        *(
            Column(col.name, SQL_TYPES[col.storage_class](), primary_key=col.primary_key)
            for col in columns
        ),
    )


def history_table(metadata: MetaData, name: str, columns: Sequence[ColumnDescriptor]) -> Table:
    """Live columns (declared order, unconstrained) + version metadata."""
    return Table(
        name,
        metadata,
        *(Column(col.name, SQL_TYPES[col.storage_class](), nullable=True) for col in columns),
        Column(VERSION_ID, Integer, primary_key=True, autoincrement=True),
        Column(
            VERSION_CREATED_AT,
            DateTime(timezone=True),
            nullable=False,
            server_default=text("CURRENT_TIMESTAMP"),
        ),
        Column(
            VERSION_OPERATION,
            Enum(
                *(op.value for op in VersionOperation),
                name=f"{name}_operation",
                native_enum=False,
                create_constraint=True,
                length=6,
            ),
            nullable=False,
        ),
        sqlite_autoincrement=True,  # ids are never reused
    )
