"""Pydantic schemas for the re-index API."""
from __future__ import annotations

from pydantic import Field

from graphsync.common.schemas import CamelModel


class ReindexOptions(CamelModel):
    """Per-call overrides; unset fields fall back to configuration."""

    batch_size: int | None = Field(default=None, ge=1, description="Actions per bulk request")
    asynchronous: bool | None = Field(default=None, alias="async", description="Dispatch batches in the background")


class ReindexRequest(ReindexOptions):
    """Request payload for re-indexing specific labels."""

    labels: list[str] = Field(..., min_length=1, description="Labels to re-index; unindexed labels are skipped")


class ReindexResponse(CamelModel):
    number_of_batches: int
    number_of_indexed_document: int


class SyncStatus(CamelModel):
    enabled: bool
    database: str | None = None
    labels: list[str] = Field(default_factory=list)
    indices: list[str] = Field(default_factory=list)
    error: str | None = None
