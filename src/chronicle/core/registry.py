"""
Registry of versioned tables owned by one `Chronicle` instance.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, PrivateAttr
from sqlalchemy import MetaData, Table

from ..config import ChronicleConfig
from ..errors import NotRegisteredError
from ..persistence.models import history_table, live_table
from ..persistence.session import ConnectionScope
from .schema import ColumnDescriptor, StorageClass, history_schema, introspect

logger = structlog.get_logger(__name__)


class TableBinding(BaseModel):
    """Live table name ➜ history table name, derived schema and config."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    history_table_name: str
    columns: tuple[ColumnDescriptor, ...]
    config: ChronicleConfig

    _live_table: Table = PrivateAttr()
    _history_table: Table = PrivateAttr()

    def model_post_init(self, _ctx: Any) -> None:
        metadata = MetaData()  # fresh per binding; re-registration never sees stale columns
        self._live_table = live_table(metadata, self.table_name, self.columns)
        self._history_table = history_table(metadata, self.history_table_name, self.columns)

    @property
    def live_table(self) -> Table:
        return self._live_table

    @property
    def history_table(self) -> Table:
        return self._history_table

    @property
    def history_columns(self) -> list[tuple[str, StorageClass]]:
        return history_schema(self.columns)

    @property
    def primary_key(self) -> list[str]:
        return [col.name for col in self.columns if col.primary_key]


class TableRegistry:
    """Maps live table names to their `TableBinding`."""

    def __init__(self, scope: ConnectionScope, config: ChronicleConfig):
        self._scope = scope
        self.config = config
        self._bindings: Dict[str, TableBinding] = {}

    def register(
        self,
        descriptors: Iterable[ColumnDescriptor | Mapping[str, Any]],
        table_name: str,
    ) -> TableBinding:
        """
        Bind `table_name` to ``table_name + suffix`` and, when auto-create is
        on, create the history table if it does not exist yet.

        Re-registering overwrites the binding. An existing history table is
        never altered, so columns added to the live table later are not
        picked up by a history table created earlier.
        """
        binding = TableBinding(
            table_name=table_name,
            history_table_name=f"{table_name}{self.config.history_table_suffix}",
            columns=introspect(descriptors),
            config=self.config,
        )
        if self.config.auto_create_history_tables:
            with self._scope.begin() as conn:
                binding.history_table.create(conn, checkfirst=True)
            logger.info(
                "History table ensured",
                table=table_name,
                history_table=binding.history_table_name,
            )
        else:
            logger.info(
                "Table registered without creating history table",
                table=table_name,
                history_table=binding.history_table_name,
            )
        self._bindings[table_name] = binding
        return binding

    def lookup(self, table_name: str) -> TableBinding:
        try:
            return self._bindings[table_name]
        except KeyError:
            raise NotRegisteredError(table_name) from None

    def names(self) -> List[str]:
        return list(self._bindings)
