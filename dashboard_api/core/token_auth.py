"""Bearer token issuing and validation.

Tokens are compact HS256 JWTs carrying the username as ``sub``, the fixed
authorities as ``roles`` and an ``exp`` expiry. They are handed to clients
in the ``X-Authentication-Token`` response header and presented back as
``Authorization: Bearer <token>``.

Every authenticated principal holds exactly ROLE_ADMIN and ROLE_USER. The
``roles`` claim is informational; decoding never grants anything else.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request
from starlette.responses import Response

from dashboard_api.config import Settings
from dashboard_api.logging_config import get_logger

logger = get_logger(__name__)

AUTH_HEADER = "Authorization"
AUTH_PREFIX = "Bearer "
AUTH_RESPONSE_HEADER = "X-Authentication-Token"
ROLES_CLAIM = "roles"


class Authority(str, enum.Enum):
    """Granted authorities understood by the dashboard."""

    ROLE_ADMIN = "ROLE_ADMIN"
    ROLE_USER = "ROLE_USER"


DEFAULT_AUTHORITIES: frozenset[str] = frozenset(
    {Authority.ROLE_ADMIN.value, Authority.ROLE_USER.value}
)


class AuthProperties(BaseModel):
    """Immutable signing configuration for TokenAuthenticationService."""

    model_config = ConfigDict(frozen=True)

    secret: str = Field(..., min_length=1)
    expiration_time_ms: int = Field(..., ge=0)
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthProperties":
        return cls(
            secret=settings.secret_key,
            expiration_time_ms=settings.auth_expiration_time_ms,
            algorithm=settings.jwt_algorithm,
        )

    @property
    def expiration(self) -> timedelta:
        return timedelta(milliseconds=self.expiration_time_ms)


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """An authenticated user as seen by request handlers."""

    username: str
    authorities: frozenset[str] = DEFAULT_AUTHORITIES
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str:
        return self.username

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


class TokenAuthenticationService:
    """Issues and validates bearer tokens with a shared secret.

    Holds nothing but its AuthProperties, so one instance can serve
    concurrent requests.
    """

    def __init__(self, properties: AuthProperties):
        self._properties = properties

    @property
    def properties(self) -> AuthProperties:
        return self._properties

    def create_token(
        self,
        username: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Sign a token for ``username``.

        ``exp`` keeps sub-second precision, so a lifetime below one second
        is honoured and a zero lifetime expires at issue time.

        Args:
            username: Token subject
            expires_delta: Lifetime; defaults to the configured expiration

        Returns:
            Encoded JWT string
        """
        if expires_delta is None:
            expires_delta = self._properties.expiration

        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": username,
            ROLES_CLAIM: sorted(DEFAULT_AUTHORITIES),
            "iat": int(issued_at.timestamp()),
            "exp": (issued_at + expires_delta).timestamp(),
        }
        return jwt.encode(
            claims,
            self._properties.secret,
            algorithm=self._properties.algorithm,
        )

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Verify signature and expiry of ``token``.

        Returns:
            The claims if the token is valid, None otherwise
        """
        try:
            claims = jwt.decode(
                token,
                self._properties.secret,
                algorithms=[self._properties.algorithm],
            )
        except JWTError as exc:
            logger.debug("Rejected bearer token", reason=str(exc))
            return None

        # jose accepts exp == now; a token is already expired at its exp second
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            logger.debug("Rejected bearer token", reason="missing exp claim")
            return None
        if datetime.now(timezone.utc).timestamp() >= exp:
            logger.debug("Rejected bearer token", reason="token expired")
            return None

        return claims

    def add_authentication(
        self,
        response: Response,
        authentication: AuthenticatedPrincipal,
    ) -> None:
        """Issue a token for ``authentication`` and attach it to ``response``.

        Only the username is taken from the principal; the token always
        carries the fixed authorities.
        """
        token = self.create_token(authentication.username)
        response.headers[AUTH_RESPONSE_HEADER] = token

    def get_authentication(self, request: Request) -> AuthenticatedPrincipal | None:
        """Resolve the principal from the request's bearer token.

        Missing header, malformed or expired token, bad signature or missing
        subject all yield None.
        """
        auth_header = request.headers.get(AUTH_HEADER)
        if not auth_header or not auth_header.startswith(AUTH_PREFIX):
            return None

        token = auth_header[len(AUTH_PREFIX):].strip()
        if not token:
            return None

        claims = self.decode_token(token)
        if claims is None:
            return None

        username = claims.get("sub")
        if not isinstance(username, str) or not username:
            logger.debug("Rejected bearer token", reason="missing subject")
            return None

        return AuthenticatedPrincipal(
            username=username,
            authorities=DEFAULT_AUTHORITIES,
            details={
                "expires_at": datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            },
        )
