"""Scope query endpoints.

Read-only views over collector-ingested scopes. All routes require a
bearer token.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_api.core.auth import get_current_principal
from dashboard_api.database import get_db
from dashboard_api.schemas.scope import (
    ScopeDataResponse,
    ScopeListResponse,
    ScopePageResponse,
    ScopeResponse,
)
from dashboard_api.services.scope import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PageRequest,
    ScopeLookupError,
    get_all_scopes,
    get_scope,
    get_scopes_by_collector,
    get_scopes_by_collector_with_filter,
)

router = APIRouter(
    prefix="/api",
    tags=["scopes"],
    dependencies=[Depends(get_current_principal)],
)


@router.get("/scope", response_model=ScopeListResponse)
async def list_scopes(
    db: AsyncSession = Depends(get_db),
) -> ScopeListResponse:
    """List every scope, project path descending, with its collector."""
    scopes = await get_all_scopes(db)
    return ScopeListResponse(
        scopes=[ScopeResponse.model_validate(s) for s in scopes],
        count=len(scopes),
    )


@router.get("/scope/{scope_id}", response_model=ScopeDataResponse)
async def get_scope_for_component(
    scope_id: str,
    component: uuid.UUID = Query(..., description="UI component ID"),
    db: AsyncSession = Depends(get_db),
) -> ScopeDataResponse:
    """Scopes with a source-system ID, stamped with the collector's last run.

    Returns 404 if the component does not exist or has no agile-tool
    collector item.
    """
    try:
        data = await get_scope(component, scope_id, db)
    except ScopeLookupError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return ScopeDataResponse(
        result=[ScopeResponse.model_validate(s) for s in data.scopes],
        last_updated=data.last_updated,
    )


@router.get("/scopecollector/{collector_id}", response_model=ScopeListResponse)
async def list_scopes_for_collector(
    collector_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ScopeListResponse:
    """List a collector's scopes with markup stripped from display fields."""
    scopes = await get_scopes_by_collector(collector_id, db)
    return ScopeListResponse(
        scopes=[ScopeResponse.model_validate(s) for s in scopes],
        count=len(scopes),
    )


@router.get("/scopecollector/page/{collector_id}", response_model=ScopePageResponse)
async def search_scopes_for_collector(
    collector_id: uuid.UUID,
    search: str = Query(default="", max_length=255),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> ScopePageResponse:
    """Page through a collector's scopes whose name contains ``search``."""
    result = await get_scopes_by_collector_with_filter(
        collector_id,
        search,
        PageRequest(page=page, size=size),
        db,
    )
    return ScopePageResponse(
        items=[ScopeResponse.model_validate(s) for s in result.items],
        total=result.total,
        page=result.page,
        size=result.size,
        total_pages=result.total_pages,
    )
