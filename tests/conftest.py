from __future__ import annotations

import asyncio
import contextlib
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from aws_chatops.config import DEFAULT_REGIONS


@pytest.fixture(autouse=True)
def _close_default_event_loop() -> None:
    yield
    policy = asyncio.get_event_loop_policy()
    local = getattr(policy, "_local", None)
    loop = getattr(local, "_loop", None) if local is not None else None
    if loop is not None and not loop.is_running() and not loop.is_closed():
        with contextlib.suppress(Exception):
            loop.close()
    if loop is not None:
        with contextlib.suppress(Exception):
            policy.set_event_loop(None)


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch: pytest.MonkeyPatch):
    from aws_chatops import config
    from aws_chatops.app import get_app_context

    # A developer's local .env must not leak into unit tests.
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    config._load_settings_cached.cache_clear()
    get_app_context.cache_clear()
    yield
    config._load_settings_cached.cache_clear()
    get_app_context.cache_clear()


class RecordingReply:
    """Reply channel double that keeps everything sent to it."""

    def __init__(self) -> None:
        self.sent: list = []

    async def send(self, content) -> None:
        self.sent.append(content)


@pytest.fixture
def reply() -> RecordingReply:
    return RecordingReply()


@pytest.fixture
def aws_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client_factory(aws_client: MagicMock) -> MagicMock:
    return MagicMock(return_value=aws_client)


@pytest.fixture
def recorder() -> MagicMock:
    recorder = MagicMock()
    recorder.record = AsyncMock()
    recorder.query = AsyncMock(return_value=[])
    return recorder


def make_settings(**overrides) -> SimpleNamespace:
    server = SimpleNamespace(
        host="127.0.0.1",
        port=4000,
        mode="http",
        history_page_size=20,
        http_allowed_origins=(),
        http_enable_cors=False,
    )
    aws = SimpleNamespace(
        default_region="eu-central-1",
        default_profile=None,
        access_key_id_present=False,
        available_regions=DEFAULT_REGIONS,
    )
    slack = SimpleNamespace(bot_token=None, app_token=None, signing_secret=None)
    dashboard = SimpleNamespace(api_tokens=("dash-token",))
    settings = SimpleNamespace(server=server, aws=aws, slack=slack, dashboard=dashboard)
    for dotted, value in overrides.items():
        section, _, attr = dotted.partition("__")
        setattr(getattr(settings, section), attr, value)
    return settings
