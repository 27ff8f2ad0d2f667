"""
Thin data-access layer around live tables and their history tables.
Every method runs on a connection handed in by the caller's transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Tuple

import structlog
from sqlalchemy import Table, and_, delete, insert, select, update
from sqlalchemy.engine import Connection

from ..core.record import Predicate, VersionOperation
from ..core.schema import VERSION_OPERATION
from ..errors import AmbiguousRecordError, UnknownColumnError

if TYPE_CHECKING:  # for type-checkers
    from ..core.registry import TableBinding

logger = structlog.get_logger(__name__)


def check_columns(table: Table, names: Iterable[str]) -> None:
    for name in names:
        if name not in table.c:
            raise UnknownColumnError(table.name, name)


def where(table: Table, predicate: Predicate):
    check_columns(table, predicate.columns)
    return and_(*(table.c[c.column] == c.value for c in predicate.constraints))


class LiveTableStore:
    """Reads and writes against a live relation."""

    # ---- reads ---------------------------------------------------------
    def fetch_one(
        self,
        conn: Connection,
        table: Table,
        predicate: Predicate,
        *,
        lock: bool = False,
    ) -> Dict[str, Any] | None:
        """Return the single row matching `predicate`, or None.

        More than one match raises `AmbiguousRecordError`. With ``lock`` the
        row is selected FOR UPDATE where the dialect supports it.
        """
        q = select(table).where(where(table, predicate)).limit(2)
        if lock:
            q = q.with_for_update()
        rows = conn.execute(q).mappings().all()
        if len(rows) > 1:
            raise AmbiguousRecordError(table.name, predicate)
        return dict(rows[0]) if rows else None

    # ---- writes --------------------------------------------------------
    def insert(self, conn: Connection, table: Table, values: Mapping[str, Any]) -> Tuple[Any, ...]:
        """Insert `values` verbatim; return the primary key the store reports."""
        check_columns(table, values)
        result = conn.execute(insert(table).values(dict(values)))
        return tuple(result.inserted_primary_key or ())

    def update(
        self,
        conn: Connection,
        table: Table,
        values: Mapping[str, Any],
        predicate: Predicate,
    ) -> None:
        check_columns(table, values)
        if not values:
            return
        conn.execute(update(table).where(where(table, predicate)).values(dict(values)))

    def delete(self, conn: Connection, table: Table, predicate: Predicate) -> None:
        conn.execute(delete(table).where(where(table, predicate)))


class HistoryRecorder:
    """Sole write path into history tables: append-only."""

    def record_version(
        self,
        conn: Connection,
        binding: "TableBinding",
        attributes: Mapping[str, Any],
        operation: VersionOperation,
    ) -> int:
        """
        Append one version row and return its store-assigned ``version_id``.

        ``version_id`` and ``version_created_at`` are never supplied here;
        the history table's key and server default assign them.
        """
        table = binding.history_table
        check_columns(table, attributes)
        row = {VERSION_OPERATION: operation.value, **attributes}
        result = conn.execute(insert(table).values(row))
        version_id = result.inserted_primary_key[0]
        logger.debug(
            "Version recorded",
            table=binding.table_name,
            history_table=binding.history_table_name,
            version_id=version_id,
            operation=operation.value,
        )
        return version_id
