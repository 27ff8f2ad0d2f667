"""
Insert / update / delete against live tables, each mirrored by exactly one
history row written in the same transaction.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Dict, Mapping, Tuple

from ..events import EventRegistry
from ..errors import RecordNotFoundError
from ..persistence.session import ConnectionScope
from ..persistence.store import HistoryRecorder, LiveTableStore, check_columns
from .record import Predicate, PredicateLike, VersionEvent, VersionOperation, as_predicate
from .registry import TableBinding, TableRegistry


class MutationInterceptor:
    """Wraps live-table writes and records a version after each one."""

    def __init__(
        self,
        registry: TableRegistry,
        scope: ConnectionScope,
        recorder: HistoryRecorder,
        events: EventRegistry,
        live: LiveTableStore | None = None,
    ):
        self._registry = registry
        self._scope = scope
        self._recorder = recorder
        self._events = events
        self._live = live or LiveTableStore()

    def insert(self, table_name: str, values: Mapping[str, Any]) -> int:
        """
        Write `values` to the live table and record an INSERT version.

        The version holds `values` as given, so store-generated columns are
        missing unless the binding's config asks for ``reread_inserted_rows``.
        """
        binding = self._registry.lookup(table_name)
        values = dict(values)
        check_columns(binding.live_table, values)

        with self._scope.begin() as conn:
            pk = self._live.insert(conn, binding.live_table, values)
            snapshot = values
            if binding.config.reread_inserted_rows:
                snapshot = self._reread(conn, binding, pk) or values
            return self._record(conn, binding, snapshot, VersionOperation.INSERT)

    def update(
        self,
        table_name: str,
        values: Mapping[str, Any],
        predicate: PredicateLike,
    ) -> int:
        """Apply a partial update; the UPDATE version holds the merged full row."""
        binding = self._registry.lookup(table_name)
        predicate = as_predicate(predicate)
        values = dict(values)
        check_columns(binding.live_table, values)

        with self._scope.begin() as conn:
            current = self._live.fetch_one(conn, binding.live_table, predicate, lock=True)
            if current is None:
                raise RecordNotFoundError(table_name, predicate)
            merged = {**current, **values}
            self._live.update(conn, binding.live_table, values, predicate)
            return self._record(conn, binding, merged, VersionOperation.UPDATE)

    def delete(self, table_name: str, predicate: PredicateLike) -> int:
        """Remove the row; the DELETE version holds its last live values."""
        binding = self._registry.lookup(table_name)
        predicate = as_predicate(predicate)

        with self._scope.begin() as conn:
            current = self._live.fetch_one(conn, binding.live_table, predicate, lock=True)
            if current is None:
                raise RecordNotFoundError(table_name, predicate)
            self._live.delete(conn, binding.live_table, predicate)
            return self._record(conn, binding, current, VersionOperation.DELETE)

    # ---- internals -----------------------------------------------------
    def _record(
        self,
        conn,
        binding: TableBinding,
        attributes: Dict[str, Any],
        operation: VersionOperation,
    ) -> int:
        version_id = self._recorder.record_version(conn, binding, attributes, operation)
        event = VersionEvent(
            table_name=binding.table_name,
            version_id=version_id,
            operation=operation,
            attributes=attributes,
        )
        self._scope.after_commit(partial(self._events.emit, event))
        return version_id

    def _reread(self, conn, binding: TableBinding, pk: Tuple[Any, ...]) -> Dict[str, Any] | None:
        columns = binding.primary_key
        if not columns or len(pk) != len(columns) or any(v is None for v in pk):
            return None
        return self._live.fetch_one(conn, binding.live_table, Predicate.of(zip(columns, pk)))
