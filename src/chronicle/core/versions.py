"""
Read side of history tables.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import select

from ..persistence.session import ConnectionScope
from ..persistence.store import where
from .record import PredicateLike, VersionRecord, as_predicate
from .registry import TableRegistry
from .schema import VERSION_ID


class VersionReader:
    def __init__(self, registry: TableRegistry, scope: ConnectionScope):
        self._registry = registry
        self._scope = scope

    def get_versions(self, table_name: str, predicate: PredicateLike) -> List[VersionRecord]:
        """
        Versions whose history columns match `predicate`, oldest→newest.

        Match on columns that stay stable across a record's versions
        (normally the primary key). No match gives an empty list.
        """
        history = self._registry.lookup(table_name).history_table
        q = (
            select(history)
            .where(where(history, as_predicate(predicate)))
            .order_by(history.c[VERSION_ID])
        )
        with self._scope.begin() as conn:
            return [VersionRecord.from_row(row) for row in conn.execute(q).mappings()]

    def get_version(self, table_name: str, version_id: int) -> VersionRecord | None:
        """Exact lookup by ``version_id``; None when it was never assigned."""
        history = self._registry.lookup(table_name).history_table
        q = select(history).where(history.c[VERSION_ID] == version_id)
        with self._scope.begin() as conn:
            row = conn.execute(q).mappings().first()
        return VersionRecord.from_row(row) if row else None

    def latest(self, table_name: str, predicate: PredicateLike) -> VersionRecord | None:
        """Newest version matching `predicate`, or None."""
        history = self._registry.lookup(table_name).history_table
        q = (
            select(history)
            .where(where(history, as_predicate(predicate)))
            .order_by(history.c[VERSION_ID].desc())
            .limit(1)
        )
        with self._scope.begin() as conn:
            row = conn.execute(q).mappings().first()
        return VersionRecord.from_row(row) if row else None
