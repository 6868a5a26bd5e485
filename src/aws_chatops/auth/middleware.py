"""Bearer token authentication for the dashboard API."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from aws_chatops.auth.context import RequestContext, reset_request_context, set_request_context
from aws_chatops.utils.hashing import sha256_text

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/api/history",)


def is_protected_path(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PREFIXES)


def token_to_user_id(token: str) -> str:
    """Derive a stable, non-reversible user id from an access token."""
    return sha256_text(token)[:16]


class BearerTokenAuthMiddleware(BaseHTTPMiddleware):
    """Accepts requests whose bearer token is one of the configured dashboard tokens."""

    def __init__(self, app, tokens: Iterable[str] = ()) -> None:
        super().__init__(app)
        self._tokens = tuple(t for t in tokens if t)

    def _is_known_token(self, token: str) -> bool:
        return any(hmac.compare_digest(token, known) for known in self._tokens)

    async def dispatch(self, request: Request, call_next):
        if not is_protected_path(request.url.path):
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return self._unauthorized("Missing or invalid Authorization header", "missing_token")

        token = auth_header[7:].strip()
        if not token or not self._is_known_token(token):
            logger.warning("Rejected dashboard request to %s: unknown token", request.url.path)
            return self._unauthorized("Invalid access token", "invalid_token")

        ctx = RequestContext(user_id=token_to_user_id(token))
        request.state.user_id = ctx.user_id

        context_token = set_request_context(ctx)
        try:
            return await call_next(request)
        finally:
            reset_request_context(context_token)

    def _unauthorized(self, message: str, code: str = "unauthorized") -> JSONResponse:
        body = {"error": "unauthorized", "error_description": message, "error_code": code}
        return JSONResponse(
            body,
            status_code=401,
            headers={"WWW-Authenticate": f'Bearer error="{code}"'},
        )
