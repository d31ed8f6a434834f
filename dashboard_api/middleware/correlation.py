"""Correlation ID middleware.

Tags every request with a correlation ID, taken from the X-Correlation-ID
request header when it is well formed and generated otherwise, and echoes
it back on the response.

Written as a pure ASGI middleware; BaseHTTPMiddleware does not play well
with asyncpg connections across tasks.
"""

import re
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from dashboard_api.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Client-supplied IDs end up in every log line; keep them short and plain
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_correlation_id(raw: bytes | None) -> str:
    """Return the client's correlation ID if acceptable, else a new UUID."""
    if raw:
        candidate = raw.decode("latin-1").strip()
        if _VALID_CORRELATION_ID.match(candidate):
            return candidate
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Sets correlation_id_ctx for the request and logs its outcome."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        correlation_id = resolve_correlation_id(headers.get(b"x-correlation-id"))
        token = correlation_id_ctx.set(correlation_id)

        method = scope.get("method", "")
        path = scope.get("path", "")
        start_time = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                response_headers = list(message.get("headers", []))
                response_headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": response_headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
        except Exception:
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise
        finally:
            correlation_id_ctx.reset(token)
