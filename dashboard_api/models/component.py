"""Dashboard UI component model.

A UI component (dashboard widget) references collector items grouped by
collector type, in a stable order per type.
"""

import uuid

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashboard_api.models.base import Base, TimestampMixin
from dashboard_api.models.collector import (
    CollectorItem,
    CollectorType,
    collector_type_enum,
)


class Component(Base, TimestampMixin):
    """Dashboard widget configuration."""

    __tablename__ = "components"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    collector_items: Mapped[list["ComponentCollectorItem"]] = relationship(
        back_populates="component",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ComponentCollectorItem.position",
    )

    def collector_items_of(self, collector_type: CollectorType) -> list[CollectorItem]:
        """Collector items of one type, in position order."""
        links = [
            link for link in self.collector_items if link.collector_type == collector_type
        ]
        links.sort(key=lambda link: link.position)
        return [link.collector_item for link in links]

    def __repr__(self) -> str:
        return f"<Component(id={self.id}, name={self.name!r})>"


class ComponentCollectorItem(Base):
    """Ordered link between a component and a collector item of one type."""

    __tablename__ = "component_collector_items"
    __table_args__ = (
        UniqueConstraint(
            "component_id",
            "collector_type",
            "collector_item_id",
            name="uq_component_collector_items_item",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    component_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("components.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    collector_type: Mapped[CollectorType] = mapped_column(
        collector_type_enum,
        nullable=False,
    )
    collector_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("collector_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    component: Mapped[Component] = relationship(back_populates="collector_items")
    collector_item: Mapped[CollectorItem] = relationship(lazy="joined")
