from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from aws_chatops.auth import (
    RequestContext,
    get_request_context,
    get_request_context_optional,
    reset_request_context,
    set_request_context,
)
from aws_chatops.auth.middleware import BearerTokenAuthMiddleware, is_protected_path, token_to_user_id


def test_request_context_roundtrip() -> None:
    assert get_request_context_optional() is None
    with pytest.raises(RuntimeError):
        get_request_context()

    token = set_request_context(RequestContext(user_id="abc"))
    try:
        assert get_request_context().user_id == "abc"
    finally:
        reset_request_context(token)

    assert get_request_context_optional() is None


def test_protected_paths() -> None:
    assert is_protected_path("/api/history")
    assert not is_protected_path("/api/integrations")
    assert not is_protected_path("/health")


def test_token_to_user_id_is_stable_and_opaque() -> None:
    user_id = token_to_user_id("secret-token")
    assert user_id == token_to_user_id("secret-token")
    assert len(user_id) == 16
    assert "secret" not in user_id


def _app(tokens=("good",)) -> Starlette:
    async def history(request: Request) -> JSONResponse:
        ctx = get_request_context()
        return JSONResponse({"user_id": ctx.user_id, "state": request.state.user_id})

    app = Starlette(routes=[Route("/api/history", history)])
    app.add_middleware(BearerTokenAuthMiddleware, tokens=tokens)
    return app


def test_middleware_sets_request_context() -> None:
    response = TestClient(_app()).get("/api/history", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    assert response.json()["user_id"] == token_to_user_id("good")
    assert response.json()["state"] == token_to_user_id("good")


def test_middleware_without_tokens_rejects_everything() -> None:
    response = TestClient(_app(tokens=())).get(
        "/api/history", headers={"Authorization": "Bearer anything"}
    )
    assert response.status_code == 401
