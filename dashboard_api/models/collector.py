"""Collector and collector item models.

A collector is an external data-source integration (Jira, Jenkins, ...)
that periodically ingests data. A collector item is one entity tracked by
a collector, such as a team or board.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from dashboard_api.models.base import Base


class CollectorType(str, enum.Enum):
    """Kinds of collectors a dashboard widget can reference."""

    AGILE_TOOL = "AgileTool"
    BUILD = "Build"
    SCM = "SCM"
    DEPLOYMENT = "Deployment"
    CODE_QUALITY = "CodeQuality"
    TEST = "Test"


collector_type_enum = ENUM(
    CollectorType,
    name="collectortype",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)


class Collector(Base):
    """Collector registration record. Read-only reference data."""

    __tablename__ = "collectors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    collector_type: Mapped[CollectorType] = mapped_column(
        collector_type_enum,
        nullable=False,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    online: Mapped[bool] = mapped_column(Boolean, default=True)
    last_executed: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Collector(name={self.name!r}, type={self.collector_type.value})>"


class CollectorItem(Base):
    """An entity tracked by a collector."""

    __tablename__ = "collector_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    collector_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("collectors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<CollectorItem(id={self.id}, collector_id={self.collector_id})>"
