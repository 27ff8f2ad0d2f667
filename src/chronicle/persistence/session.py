"""
Transaction scoping for a single engine.

• Inside an open `ConnectionScope.begin()` block → reuse that connection
• Outside                                       → open a short-lived engine.begin()
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageError

logger = structlog.get_logger(__name__)


class ConnectionScope:
    """Per-thread ambient connection with after-commit callbacks."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    @property
    def connection(self) -> Connection | None:
        return getattr(self._local, "connection", None)

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Join the ambient transaction, or open one that commits on exit.

        SQLAlchemy errors are re-raised as `StorageError`. A failed statement
        in a joined block marks the whole transaction rollback-only: the
        outermost block then rolls back and raises `StorageError` even if
        the caller caught the first error. Callbacks queued with
        `after_commit` run only once the outermost block has committed.
        """
        active = self.connection
        if active is not None:
            try:
                yield active
            except SQLAlchemyError as exc:
                self._local.failed = True
                logger.warning("Statement failed; transaction marked rollback-only", error=str(exc))
                raise StorageError(str(exc)) from exc
            return

        callbacks: List[Callable[[], None]] = []
        try:
            with self.engine.begin() as conn:
                self._local.connection = conn
                self._local.callbacks = callbacks
                self._local.failed = False
                try:
                    yield conn
                    if self._local.failed:
                        raise StorageError("Transaction rolled back after a failed statement")
                finally:
                    self._local.connection = None
                    self._local.callbacks = None
                    self._local.failed = False
        except SQLAlchemyError as exc:
            logger.warning("Transaction rolled back", error=str(exc))
            raise StorageError(str(exc)) from exc

        self._run(callbacks)

    def after_commit(self, callback: Callable[[], None]) -> None:
        callbacks = getattr(self._local, "callbacks", None)
        if callbacks is None:  # no open transaction
            callback()
        else:
            callbacks.append(callback)

    def _run(self, callbacks: List[Callable[[], None]]) -> None:
        """Run every callback; re-raise the first failure once all have run."""
        errors: List[Exception] = []
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                logger.error("After-commit callback failed", error=str(exc))
                errors.append(exc)
        if errors:
            raise errors[0]
