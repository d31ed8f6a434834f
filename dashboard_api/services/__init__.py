# Business Logic Services
from dashboard_api.services.scope import (
    AgileCollectorItemNotFoundError,
    ComponentNotFoundError,
    PageRequest,
    ScopeDataResult,
    ScopeLookupError,
    ScopePage,
    get_all_scopes,
    get_scope,
    get_scopes_by_collector,
    get_scopes_by_collector_with_filter,
)

__all__ = [
    "AgileCollectorItemNotFoundError",
    "ComponentNotFoundError",
    "PageRequest",
    "ScopeDataResult",
    "ScopeLookupError",
    "ScopePage",
    "get_all_scopes",
    "get_scope",
    "get_scopes_by_collector",
    "get_scopes_by_collector_with_filter",
]
