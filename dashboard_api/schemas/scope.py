"""Scope and collector response schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from dashboard_api.models.collector import CollectorType


class CollectorResponse(BaseModel):
    """Collector attached to a scope."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    collector_type: CollectorType
    enabled: bool
    online: bool
    last_executed: datetime | None = None


class ScopeResponse(BaseModel):
    """Response schema for a single scope."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    scope_id: str
    collector_id: uuid.UUID
    name: str
    project_path: str | None = None
    begin_date: datetime | None = None
    end_date: datetime | None = None
    change_date: datetime | None = None
    asset_state: str | None = None
    is_deleted: bool = False
    collector: CollectorResponse | None = None


class ScopeListResponse(BaseModel):
    """Response schema for listing scopes."""

    scopes: list[ScopeResponse]
    count: int


class ScopeDataResponse(BaseModel):
    """Scopes for a UI component with the collector's last execution time."""

    result: list[ScopeResponse]
    last_updated: datetime | None = Field(
        default=None,
        description="When the agile-tool collector last ran.",
    )


class ScopePageResponse(BaseModel):
    """One page of filtered scopes."""

    items: list[ScopeResponse]
    total: int = Field(..., description="Number of scopes matching the filter.")
    page: int = Field(..., description="Zero-based page number.")
    size: int
    total_pages: int
