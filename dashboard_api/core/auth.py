"""Authentication dependencies for protected routes.

Requests authenticate with ``Authorization: Bearer <token>``; tokens are
issued by the login and registration endpoints.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from dashboard_api.config import settings
from dashboard_api.core.token_auth import (
    AuthenticatedPrincipal,
    AuthProperties,
    TokenAuthenticationService,
)
from dashboard_api.logging_config import get_logger, principal_ctx

logger = get_logger(__name__)


@lru_cache
def get_token_service() -> TokenAuthenticationService:
    """Process-wide token service built from settings on first use."""
    return TokenAuthenticationService(AuthProperties.from_settings(settings))


TokenService = Annotated[TokenAuthenticationService, Depends(get_token_service)]


async def get_current_principal(
    request: Request,
    token_service: TokenService,
) -> AuthenticatedPrincipal:
    """Resolve the authenticated principal or reject the request.

    Raises:
        HTTPException 401: If the bearer token is missing or invalid
    """
    principal = token_service.get_authentication(request)
    if principal is None:
        client_ip = request.client.host if request.client else "unknown"
        logger.info(
            "Unauthenticated request rejected",
            path=request.url.path,
            method=request.method,
            client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal_ctx.set(principal.username)
    return principal


CurrentPrincipal = Annotated[AuthenticatedPrincipal, Depends(get_current_principal)]
