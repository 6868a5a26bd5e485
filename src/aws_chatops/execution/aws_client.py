"""AWS client factory.

Clients are built per ``(service, region)`` and handed to adapters
explicitly. A small LRU cache keeps recently used clients around so a
burst of commands against one region does not rebuild sessions.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import boto3
from botocore.config import Config

from aws_chatops.config import Settings, load_settings

ClientCacheKey = tuple[str, str, str]
ClientFactory = Callable[[str, str], Any]

_CLIENT_CACHE: OrderedDict[ClientCacheKey, tuple[object, float]] = OrderedDict()
_CLIENT_CACHE_LOCK = threading.Lock()
_CLIENT_TTL_SECONDS = 3600  # 1 hour
_CLIENT_CACHE_MAX_SIZE = 32


def _get_cached_client(
    key: ClientCacheKey,
    build_client: Callable[[], object],
) -> object:
    now = time.monotonic()
    with _CLIENT_CACHE_LOCK:
        cached = _CLIENT_CACHE.get(key)
        if cached is not None:
            client, created_at = cached
            if now - created_at < _CLIENT_TTL_SECONDS:
                _CLIENT_CACHE.move_to_end(key)
                return client
            del _CLIENT_CACHE[key]
        client = build_client()
        _CLIENT_CACHE[key] = (client, now)
        while len(_CLIENT_CACHE) > _CLIENT_CACHE_MAX_SIZE:
            _CLIENT_CACHE.popitem(last=False)
        return client


def get_client(service: str, region: str | None = None, profile: str | None = None):
    """Return a boto3 client for ``service`` in ``region``."""
    settings = load_settings()
    resolved_region = (region or settings.aws.default_region).lower()
    resolved_profile = profile or settings.aws.default_profile or ""
    key = (service, resolved_region, resolved_profile)
    return _get_cached_client(
        key,
        lambda: _create_client(service, resolved_region, resolved_profile or None, settings),
    )


def _create_client(
    service: str,
    region: str,
    profile: str | None,
    settings: Settings,
):
    session = boto3.Session(profile_name=profile, region_name=region)
    return session.client(service, config=_get_service_config(service, settings))


def _get_service_config(service: str, settings: Settings) -> Config:
    base: dict[str, object] = {
        "read_timeout": settings.execution.sdk_timeout_seconds,
        "connect_timeout": settings.execution.sdk_timeout_seconds,
        "retries": {"max_attempts": settings.execution.max_retries, "mode": "standard"},
    }
    if service == "s3":
        base["request_checksum_calculation"] = "when_required"
        base["response_checksum_validation"] = "when_required"
    return Config(**base)


def _call_method(client, method_name: str, kwargs: dict[str, object]):
    method = getattr(client, method_name)
    return method(**kwargs)


async def call_aws_api_async(client, method_name: str, **kwargs):
    """Run a blocking boto3 call in a worker thread."""
    return await asyncio.to_thread(_call_method, client, method_name, kwargs)


def _paginate(client, method_name: str, result_key: str, kwargs: dict[str, object]) -> list:
    paginator = client.get_paginator(method_name)
    items: list = []
    for page in paginator.paginate(**kwargs):
        items.extend(page.get(result_key, []))
    return items


async def paginate_async(client, method_name: str, result_key: str, **kwargs) -> list:
    """Collect ``result_key`` across all pages of a paginated call."""
    return await asyncio.to_thread(_paginate, client, method_name, result_key, kwargs)
