"""Scope model.

A scope is project/team metadata ingested by an agile-tool collector.
Rows are written by the ingestion process; this API only reads them.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from dashboard_api.models.base import Base, TimestampMixin


class Scope(Base, TimestampMixin):
    """Project/team metadata record tied to a collector.

    Attributes:
        id: Unique row identifier
        scope_id: Identifier of the scope in the source system
        collector_id: Collector that ingested this scope
        name: Display name; may contain markup characters
        project_path: Display path; may contain markup characters
        collector: Owning Collector, attached by the scope service (not a column)
    """

    __tablename__ = "scopes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    scope_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    collector_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("collectors.id"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    begin_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    change_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    asset_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    # Not mapped
    collector = None

    def __repr__(self) -> str:
        return f"<Scope(scope_id={self.scope_id!r}, name={self.name!r})>"
