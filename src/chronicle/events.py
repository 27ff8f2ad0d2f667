"""
chronicle.events  ──  decorators for post-commit version hooks

    chronicle = Chronicle(engine)

    @chronicle.on.update("users")
    def audit(event: VersionEvent) -> None: ...
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

import structlog

from .core.record import VersionEvent, VersionOperation

logger = structlog.get_logger(__name__)

Handler = Callable[[VersionEvent], None]


class EventRegistry:
    """Handlers per operation, kept in registration order."""

    def __init__(self):
        # operation -> [(table names or None for all tables, handler)]
        self._handlers: Dict[VersionOperation, List[Tuple[Optional[FrozenSet[str]], Handler]]] = {
            op: [] for op in VersionOperation
        }

    def register(
        self,
        operation: VersionOperation,
        table_names: tuple[str, ...],
        handler: Handler,
    ) -> None:
        names = frozenset(table_names) if table_names else None
        self._handlers[operation].append((names, handler))

    def emit(self, event: VersionEvent) -> None:
        """Call every matching handler, then re-raise the first failure."""
        errors: List[Exception] = []
        for names, handler in list(self._handlers[event.operation]):
            if names is not None and event.table_name not in names:
                continue
            try:
                handler(event)
            except Exception as exc:
                logger.error(
                    "Version handler failed",
                    handler=getattr(handler, "__name__", repr(handler)),
                    table=event.table_name,
                    version_id=event.version_id,
                    error=str(exc),
                )
                errors.append(exc)
        if errors:
            raise errors[0]


class OnDecorator:
    """Namespace for event decorators"""

    def __init__(self, registry: EventRegistry):
        self._registry = registry

    def _decorator(self, operation: VersionOperation, table_names: tuple[str, ...]) -> Callable:
        def decorator(func: Handler) -> Handler:
            self._registry.register(operation, table_names, func)
            return func

        return decorator

    def insert(self, *table_names: str) -> Callable:
        return self._decorator(VersionOperation.INSERT, table_names)

    def update(self, *table_names: str) -> Callable:
        return self._decorator(VersionOperation.UPDATE, table_names)

    def delete(self, *table_names: str) -> Callable:
        return self._decorator(VersionOperation.DELETE, table_names)
