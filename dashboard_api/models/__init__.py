# Database Models
from dashboard_api.models.base import Base, TimestampMixin
from dashboard_api.models.collector import Collector, CollectorItem, CollectorType
from dashboard_api.models.component import Component, ComponentCollectorItem
from dashboard_api.models.scope import Scope
from dashboard_api.models.user_account import UserAccount

__all__ = [
    "Base",
    "Collector",
    "CollectorItem",
    "CollectorType",
    "Component",
    "ComponentCollectorItem",
    "Scope",
    "TimestampMixin",
    "UserAccount",
]
