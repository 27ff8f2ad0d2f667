"""
Rollback = a new UPDATE whose content equals an older version.
History is never rewritten or truncated.
"""

from __future__ import annotations

import structlog

from ..errors import VersionNotFoundError
from ..persistence.session import ConnectionScope
from .mutations import MutationInterceptor
from .record import PredicateLike, as_predicate
from .versions import VersionReader

logger = structlog.get_logger(__name__)


class RollbackEngine:
    def __init__(
        self,
        reader: VersionReader,
        mutations: MutationInterceptor,
        scope: ConnectionScope,
    ):
        self._reader = reader
        self._mutations = mutations
        self._scope = scope

    def rollback(self, table_name: str, version_id: int, predicate: PredicateLike) -> int:
        """Restore the row matching `predicate` to version `version_id`.

        Returns the id of the UPDATE version the restore appends.
        Raises `VersionNotFoundError` (before touching the live table) when
        the version does not exist, and `RecordNotFoundError` when no live
        row matches `predicate`.
        """
        predicate = as_predicate(predicate)
        with self._scope.begin():
            version = self._reader.get_version(table_name, version_id)
            if version is None:
                raise VersionNotFoundError(version_id)
            new_version_id = self._mutations.update(table_name, version.attributes, predicate)

        logger.info(
            "Record rolled back",
            table=table_name,
            restored_version_id=version_id,
            version_id=new_version_id,
            where=str(predicate),
        )
        return new_version_id
