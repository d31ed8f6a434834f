"""Authentication router.

Registration and login. Both issue a bearer token in the
X-Authentication-Token response header.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_api.core.auth import TokenService
from dashboard_api.core.security import hash_password, normalize_username, verify_password
from dashboard_api.core.token_auth import AuthenticatedPrincipal
from dashboard_api.database import get_db
from dashboard_api.logging_config import get_logger
from dashboard_api.middleware.rate_limit import limiter
from dashboard_api.models.user_account import UserAccount
from dashboard_api.schemas.auth import (
    AuthenticationResponse,
    CredentialsRequest,
    ErrorResponse,
    RegistrationRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

_REGISTRATION_FAILED = "Registration failed. Please choose a different username."


def _issue_token(
    response: Response,
    token_service: TokenService,
    username: str,
    message: str,
) -> AuthenticationResponse:
    principal = AuthenticatedPrincipal(username=username)
    token_service.add_authentication(response, principal)
    return AuthenticationResponse(
        username=principal.username,
        authorities=sorted(principal.authorities),
        message=message,
    )


@router.post(
    "/register",
    response_model=AuthenticationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created and token issued"},
        409: {"model": ErrorResponse, "description": "Username already exists"},
    },
)
async def register(
    body: RegistrationRequest,
    response: Response,
    token_service: TokenService,
    db: AsyncSession = Depends(get_db),
) -> AuthenticationResponse:
    """Create a local account and log it in.

    Raises:
        HTTPException 409: If the username is taken
    """
    username = normalize_username(body.username)

    existing = await db.execute(
        select(UserAccount).where(UserAccount.username == username)
    )
    if existing.scalar_one_or_none():
        logger.warning("Registration attempt with existing username", username=username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_REGISTRATION_FAILED,
        )

    account = UserAccount(
        username=username,
        hashed_password=hash_password(body.password),
    )

    try:
        db.add(account)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Registration failed - integrity error", username=username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_REGISTRATION_FAILED,
        )

    logger.info("Account registered", username=username)
    return _issue_token(response, token_service, username, "Registration successful")


@router.post(
    "/login",
    response_model=AuthenticationResponse,
    responses={
        200: {"description": "Login successful, token issued"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
@limiter.limit("10/minute")
async def login(
    body: CredentialsRequest,
    response: Response,
    request: Request,
    token_service: TokenService,
    db: AsyncSession = Depends(get_db),
) -> AuthenticationResponse:
    """Verify credentials and issue a bearer token."""
    client_ip = request.client.host if request.client else "unknown"
    username = normalize_username(body.username)

    result = await db.execute(
        select(UserAccount).where(UserAccount.username == username)
    )
    account = result.scalar_one_or_none()

    if account is None or not verify_password(body.password, account.hashed_password):
        logger.warning(
            "Failed login attempt",
            username=username,
            client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    logger.info("User logged in", username=username, client_ip=client_ip)
    return _issue_token(response, token_service, account.username, "Login successful")
