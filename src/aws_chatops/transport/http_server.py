"""Starlette HTTP server: dashboard API plus Slack event delivery."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from aws_chatops.app import AppContext, get_app_context
from aws_chatops.auth import get_request_context
from aws_chatops.auth.middleware import BearerTokenAuthMiddleware
from aws_chatops.integrations import integration_statuses

logger = logging.getLogger(__name__)


def _parse_limit(raw: str | None, page_size: int) -> int:
    """``?limit=`` may shrink the page but never grow it past ``page_size``."""
    if raw is None or raw.strip() == "":
        return page_size
    limit = int(raw)
    if limit < 1:
        raise ValueError("limit must be a positive integer")
    return min(limit, page_size)


def create_http_app(ctx: AppContext | None = None) -> Starlette:
    """Create the HTTP application."""
    ctx = ctx or get_app_context()
    settings = ctx.settings

    if not settings.dashboard.api_tokens:
        logger.warning("DASHBOARD_API_TOKENS is empty; /api/history will reject every request")

    middleware: list[Middleware] = [
        Middleware(BearerTokenAuthMiddleware, tokens=settings.dashboard.api_tokens),
    ]

    # CORS must be outermost so preflight requests are answered before auth runs.
    if settings.server.http_enable_cors and settings.server.http_allowed_origins:
        from starlette.middleware.cors import CORSMiddleware

        middleware.insert(
            0,
            Middleware(
                CORSMiddleware,
                allow_origins=list(settings.server.http_allowed_origins),
                allow_methods=["GET", "OPTIONS"],
                allow_headers=["Authorization", "Content-Type", "Accept"],
            ),
        )

    async def health_handler(request: Request) -> Response:
        return JSONResponse({"status": "healthy"})

    async def history_handler(request: Request) -> Response:
        try:
            limit = _parse_limit(
                request.query_params.get("limit"), settings.server.history_page_size
            )
        except ValueError:
            return JSONResponse(
                {"error": "invalid_limit", "message": "limit must be a positive integer"},
                status_code=400,
            )
        caller = get_request_context()
        logger.info(
            "History requested by %s (limit=%d, request=%s)",
            caller.user_id,
            limit,
            caller.request_id,
        )
        try:
            records = await ctx.recorder.query(limit)
        except Exception:
            logger.exception("Failed to read command history for %s", caller.user_id)
            return JSONResponse(
                {"error": "internal_error", "message": "Failed to fetch command history"},
                status_code=500,
            )
        return JSONResponse([record.to_dict() for record in records])

    async def integrations_handler(request: Request) -> Response:
        return JSONResponse([status.to_dict() for status in integration_statuses(settings)])

    routes = [
        Route("/health", endpoint=health_handler, methods=["GET"]),
        Route("/api/history", endpoint=history_handler, methods=["GET"]),
        Route("/api/integrations", endpoint=integrations_handler, methods=["GET"]),
    ]

    bot = ctx.slack_bot
    socket_mode = settings.server.mode == "socket"

    if bot is not None and not socket_mode:
        slack_handler = bot.request_handler()

        async def slack_events_handler(request: Request) -> Response:
            return await slack_handler.handle(request)

        routes.append(Route("/slack/events", endpoint=slack_events_handler, methods=["POST"]))

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Starting ChatOps HTTP server in %s mode...", settings.server.mode)
        if bot is not None and socket_mode:
            await bot.start()
        try:
            yield
        finally:
            logger.info("Stopping ChatOps HTTP server...")
            if bot is not None and socket_mode:
                await bot.stop()
            ctx.store.close()

    return Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
