from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from aws_chatops.execution import aws_client
from aws_chatops.execution.aws_client import (
    _CLIENT_CACHE,
    _get_service_config,
    call_aws_api_async,
    get_client,
    paginate_async,
)


@pytest.fixture(autouse=True)
def _clear_client_cache() -> None:
    _CLIENT_CACHE.clear()
    yield
    _CLIENT_CACHE.clear()


def _settings(profile: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        aws=SimpleNamespace(default_profile=profile, default_region="eu-central-1"),
        execution=SimpleNamespace(sdk_timeout_seconds=30, max_retries=2),
    )


@patch("aws_chatops.execution.aws_client.load_settings")
@patch("aws_chatops.execution.aws_client.boto3.Session")
def test_get_client_is_cached_per_region(mock_session_cls: MagicMock, mock_settings: MagicMock) -> None:
    mock_settings.return_value = _settings("ops")

    first = get_client("ec2", "us-east-1")
    second = get_client("ec2", "US-EAST-1")
    other = get_client("ec2", "eu-west-1")

    assert first is second
    assert mock_session_cls.call_count == 2
    mock_session_cls.assert_any_call(profile_name="ops", region_name="us-east-1")
    mock_session_cls.assert_any_call(profile_name="ops", region_name="eu-west-1")
    assert other is mock_session_cls.return_value.client.return_value


@patch("aws_chatops.execution.aws_client.load_settings")
@patch("aws_chatops.execution.aws_client.boto3.Session")
def test_get_client_defaults_region(mock_session_cls: MagicMock, mock_settings: MagicMock) -> None:
    mock_settings.return_value = _settings()

    get_client("s3")

    mock_session_cls.assert_called_once_with(profile_name=None, region_name="eu-central-1")


def test_cache_evicts_least_recently_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(aws_client, "_CLIENT_CACHE_MAX_SIZE", 2)

    aws_client._get_cached_client(("s3", "a", ""), object)
    aws_client._get_cached_client(("s3", "b", ""), object)
    aws_client._get_cached_client(("s3", "a", ""), object)
    aws_client._get_cached_client(("s3", "c", ""), object)

    assert list(_CLIENT_CACHE) == [("s3", "a", ""), ("s3", "c", "")]


def test_service_config() -> None:
    s3_config = _get_service_config("s3", _settings())
    ec2_config = _get_service_config("ec2", _settings())

    assert s3_config.retries == {"max_attempts": 2, "mode": "standard"}
    assert s3_config.request_checksum_calculation == "when_required"
    assert ec2_config.read_timeout == 30


def test_call_aws_api_async() -> None:
    client = MagicMock()
    client.head_bucket.return_value = {"ok": True}

    result = asyncio.run(call_aws_api_async(client, "head_bucket", Bucket="b"))

    assert result == {"ok": True}
    client.head_bucket.assert_called_once_with(Bucket="b")


def test_paginate_async_collects_all_pages() -> None:
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"Reservations": [1, 2]},
        {},
        {"Reservations": [3]},
    ]

    items = asyncio.run(paginate_async(client, "describe_instances", "Reservations"))

    assert items == [1, 2, 3]
