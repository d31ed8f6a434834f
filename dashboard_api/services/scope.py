"""Scope lookup service.

Reads scopes ingested by agile-tool collectors, attaches the owning
collector, and strips markup characters from display fields.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_api.logging_config import get_logger
from dashboard_api.models.collector import Collector, CollectorType
from dashboard_api.models.component import Component
from dashboard_api.models.scope import Scope

logger = get_logger(__name__)

MARKUP_CHARACTERS = re.compile(r"[<>]")

# Byte-order collation; code-point order for UTF-8 text
PATH_COLLATION = "C"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ScopeLookupError(Exception):
    """Base exception for scope lookups that cannot be resolved."""

    pass


class ComponentNotFoundError(ScopeLookupError):
    """The referenced UI component does not exist."""

    pass


class AgileCollectorItemNotFoundError(ScopeLookupError):
    """The UI component has no agile-tool collector item."""

    pass


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number and page size."""

    page: int = 0
    size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("Page number must not be negative")
        if not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValueError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class ScopePage:
    """One page of scopes plus the total number of matches."""

    items: list[Scope]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.size)


@dataclass
class ScopeDataResult:
    """Scopes paired with the last execution time of their collector."""

    scopes: list[Scope]
    last_updated: datetime | None


def strip_markup(value: str | None) -> str | None:
    """Remove every ``<`` and ``>`` from ``value``."""
    if value is None:
        return None
    return MARKUP_CHARACTERS.sub("", value)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def _attach_collectors(scopes: list[Scope], db: AsyncSession) -> None:
    """Set ``scope.collector`` on each scope; None where the collector is gone."""
    collector_ids = {scope.collector_id for scope in scopes}
    if not collector_ids:
        return

    result = await db.execute(
        select(Collector).where(Collector.id.in_(list(collector_ids)))
    )
    collectors = {collector.id: collector for collector in result.scalars().all()}

    for scope in scopes:
        scope.collector = collectors.get(scope.collector_id)


async def get_all_scopes(db: AsyncSession) -> list[Scope]:
    """All scopes, project path descending, each with its collector attached.

    Paths compare by code point regardless of the database collation;
    scopes without a path come last.
    """
    result = await db.execute(
        select(Scope).order_by(
            Scope.project_path.collate(PATH_COLLATION).desc().nulls_last()
        )
    )
    scopes = list(result.scalars().all())

    await _attach_collectors(scopes, db)
    return scopes


async def get_scope(
    component_id: uuid.UUID,
    scope_id: str,
    db: AsyncSession,
) -> ScopeDataResult:
    """Scopes with the given source-system id, as seen by a UI component.

    The timestamp returned is the last execution of the collector behind
    the component's first agile-tool collector item.

    Raises:
        ComponentNotFoundError: If the component does not exist.
        AgileCollectorItemNotFoundError: If it has no agile-tool item.
    """
    component = await db.get(Component, component_id)
    if component is None:
        raise ComponentNotFoundError(f"Component {component_id} not found")

    items = component.collector_items_of(CollectorType.AGILE_TOOL)
    if not items:
        raise AgileCollectorItemNotFoundError(
            f"Component {component_id} has no {CollectorType.AGILE_TOOL.value} "
            "collector item"
        )
    item = items[0]

    # TODO: restrict to scopes owned by the team behind `item` once product
    # confirms the scope-by-id endpoint should be team-filtered.
    result = await db.execute(select(Scope).where(Scope.scope_id == scope_id))
    scopes = list(result.scalars().all())

    collector = await db.get(Collector, item.collector_id)
    if collector is None:
        logger.warning(
            "Collector missing for agile-tool collector item",
            component_id=str(component_id),
            collector_item_id=str(item.id),
            collector_id=str(item.collector_id),
        )

    return ScopeDataResult(
        scopes=scopes,
        last_updated=collector.last_executed if collector else None,
    )


async def get_scopes_by_collector(
    collector_id: uuid.UUID,
    db: AsyncSession,
) -> list[Scope]:
    """All scopes of a collector with markup stripped from display fields.

    The returned scopes are detached from the session, so stripping never
    reaches the stored rows.
    """
    result = await db.execute(select(Scope).where(Scope.collector_id == collector_id))
    scopes = list(result.scalars().all())

    for scope in scopes:
        db.expunge(scope)
        scope.name = strip_markup(scope.name)
        scope.project_path = strip_markup(scope.project_path)

    return scopes


async def get_scopes_by_collector_with_filter(
    collector_id: uuid.UUID,
    name: str,
    page: PageRequest,
    db: AsyncSession,
) -> ScopePage:
    """One page of a collector's scopes whose name contains ``name``.

    Matching is case-insensitive; ``%`` and ``_`` match literally. Display
    fields are returned as stored.
    """
    criteria = (
        Scope.collector_id == collector_id,
        Scope.name.ilike(f"%{_escape_like(name)}%", escape="\\"),
    )

    total = await db.scalar(select(func.count()).select_from(Scope).where(*criteria))

    result = await db.execute(
        select(Scope)
        .where(*criteria)
        .order_by(Scope.name, Scope.id)
        .offset(page.offset)
        .limit(page.size)
    )

    return ScopePage(
        items=list(result.scalars().all()),
        total=total or 0,
        page=page.page,
        size=page.size,
    )
