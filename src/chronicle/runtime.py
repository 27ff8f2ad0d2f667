"""
chronicle.runtime  ──  the engine object callers hold on to.

Usage pattern in user code
--------------------------
    from chronicle import Chronicle, ColumnDescriptor

    chronicle = Chronicle.from_url("sqlite:///app.db")
    chronicle.register_table(
        [ColumnDescriptor(name="id", storage_class="integer", primary_key=True),
         ColumnDescriptor(name="name")],
        "users",
    )
    chronicle.insert("users", {"id": 1, "name": "Ada"})
    chronicle.update("users", {"name": "Ada L."}, {"id": 1})
    chronicle.get_versions("users", {"id": 1})
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Mapping

import structlog
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine

from .config import ChronicleConfig, VersioningStrategy
from .core.mutations import MutationInterceptor
from .core.record import PredicateLike, VersionRecord
from .core.registry import TableBinding, TableRegistry
from .core.rollback import RollbackEngine
from .core.schema import ColumnDescriptor
from .core.versions import VersionReader
from .errors import ConfigurationError
from .events import EventRegistry, OnDecorator
from .persistence.session import ConnectionScope
from .persistence.store import HistoryRecorder

logger = structlog.get_logger(__name__)


class Chronicle:
    """
    Versioning engine bound to one SQLAlchemy engine.

    Owns its table registry and event handlers; there is no process-wide
    instance, so two `Chronicle`s never share registrations.
    """

    def __init__(
        self,
        engine: Engine,
        config: ChronicleConfig | None = None,
        **options: Any,
    ):
        if config is not None and options:
            raise ConfigurationError("Pass either a ChronicleConfig or keyword options, not both")
        if config is None:
            try:
                config = ChronicleConfig(**options)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid Chronicle options: {exc}") from exc
        if config.strategy is not VersioningStrategy.SIMPLE:
            raise ConfigurationError(f"Versioning strategy {config.strategy.value!r} is not supported")

        self._engine = engine
        self._config = config
        self._scope = ConnectionScope(engine)
        self._events = EventRegistry()
        self.on = OnDecorator(self._events)

        self._registry = TableRegistry(self._scope, config)
        self._mutations = MutationInterceptor(
            self._registry, self._scope, HistoryRecorder(), self._events
        )
        self._reader = VersionReader(self._registry, self._scope)
        self._rollback = RollbackEngine(self._reader, self._mutations, self._scope)

    # ---------- construction helpers ----------
    @classmethod
    def from_url(cls, database_url: str, **options: Any) -> "Chronicle":
        """
        One-liner for scripts:
            chronicle = Chronicle.from_url("sqlite:///app.db", history_table_suffix="_v")
        """
        engine = create_engine(database_url, pool_pre_ping=True, future=True)
        return cls(engine, **options)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def config(self) -> ChronicleConfig:
        return self._config

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Group several calls into one transaction that commits on exit."""
        with self._scope.begin() as conn:
            yield conn

    # ---------- registry ----------
    def register_table(
        self,
        columns: Iterable[ColumnDescriptor | Mapping[str, Any]],
        table_name: str,
    ) -> TableBinding:
        binding = self._registry.register(columns, table_name)
        if self._config.reread_inserted_rows and not binding.primary_key:
            logger.warning(
                "No primary key declared; INSERT versions keep the supplied values",
                table=table_name,
            )
        return binding

    def binding(self, table_name: str) -> TableBinding:
        return self._registry.lookup(table_name)

    def registered_tables(self) -> List[str]:
        return self._registry.names()

    # ---------- mutations ----------
    def insert(self, table_name: str, values: Mapping[str, Any]) -> int:
        return self._mutations.insert(table_name, values)

    def update(self, table_name: str, values: Mapping[str, Any], where: PredicateLike) -> int:
        return self._mutations.update(table_name, values, where)

    def delete(self, table_name: str, where: PredicateLike) -> int:
        return self._mutations.delete(table_name, where)

    # ---------- history ----------
    def get_versions(self, table_name: str, where: PredicateLike) -> List[VersionRecord]:
        return self._reader.get_versions(table_name, where)

    def get_version(self, table_name: str, version_id: int) -> VersionRecord | None:
        return self._reader.get_version(table_name, version_id)

    def latest_version(self, table_name: str, where: PredicateLike) -> VersionRecord | None:
        return self._reader.latest(table_name, where)

    def rollback(self, table_name: str, version_id: int, where: PredicateLike) -> int:
        return self._rollback.rollback(table_name, version_id, where)
