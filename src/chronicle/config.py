"""
Engine-wide settings shared by every registered table.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VersioningStrategy(str, Enum):
    SIMPLE = "simple-versioning"
    UNI_TEMPORAL = "uni-temporal"
    BI_TEMPORAL = "bi-temporal"


class ChronicleConfig(BaseModel):
    """Recognised options; unknown keys are rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: VersioningStrategy = VersioningStrategy.SIMPLE
    history_table_suffix: str = Field(default="_history", min_length=1)
    auto_create_history_tables: bool = True
    # capture identity keys / server defaults in INSERT versions (costs one SELECT)
    reread_inserted_rows: bool = False
