"""
Version / predicate kernel – *pure Pydantic* (no SQLAlchemy imports).

* `VersionRecord` ➜ one immutable row of a history table.
* `Predicate`     ➜ ordered conjunction of column equality constraints.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvalidPredicateError
from .schema import METADATA_COLUMN_NAMES, VERSION_CREATED_AT, VERSION_ID, VERSION_OPERATION


class VersionOperation(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# predicates
class Equals(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    value: Any = None

    def __str__(self) -> str:
        return f"{self.column} = {self.value!r}"


class Predicate(BaseModel):
    """Conjunction of `Equals` constraints, kept in the order given."""

    model_config = ConfigDict(frozen=True)

    constraints: Tuple[Equals, ...] = Field(min_length=1)

    @classmethod
    def where(cls, **values: Any) -> "Predicate":
        """``Predicate.where(id=1)`` – constraints follow keyword order."""
        return cls.of(values.items())

    @classmethod
    def of(cls, pairs: Iterable[tuple[str, Any]]) -> "Predicate":
        try:
            return cls(constraints=tuple(Equals(column=c, value=v) for c, v in pairs))
        except ValidationError as exc:
            raise InvalidPredicateError(f"Invalid predicate: {exc}") from exc

    @property
    def columns(self) -> list[str]:
        return [c.column for c in self.constraints]

    def __str__(self) -> str:
        return " AND ".join(str(c) for c in self.constraints)


PredicateLike = Union[Predicate, Mapping[str, Any], Iterable[Tuple[str, Any]]]


def as_predicate(value: PredicateLike) -> Predicate:
    """Accept a `Predicate`, a mapping, or ``(column, value)`` pairs."""
    if isinstance(value, Predicate):
        return value
    if isinstance(value, Mapping):
        return Predicate.of(value.items())
    return Predicate.of(value)


# versions
class VersionRecord(BaseModel):
    """Immutable snapshot of a record plus its version metadata."""

    model_config = ConfigDict(frozen=True)

    version_id: int
    created_at: dt.datetime
    operation: VersionOperation
    attributes: Dict[str, Any]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "VersionRecord":
        return cls(
            version_id=row[VERSION_ID],
            created_at=row[VERSION_CREATED_AT],
            operation=row[VERSION_OPERATION],
            attributes={k: v for k, v in row.items() if k not in METADATA_COLUMN_NAMES},
        )

    def as_row(self) -> Dict[str, Any]:
        """Flat history row: attributes followed by the metadata columns."""
        return {
            **self.attributes,
            VERSION_ID: self.version_id,
            VERSION_CREATED_AT: self.created_at,
            VERSION_OPERATION: self.operation.value,
        }


class VersionEvent(BaseModel):
    """Payload handed to `on.insert/update/delete` handlers after commit."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    version_id: int
    operation: VersionOperation
    attributes: Dict[str, Any]
