from __future__ import annotations

import pytest

from aws_chatops import config


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in config.ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_split_csv() -> None:
    assert config._split_csv(" a, b ,,c ") == ["a", "b", "c"]
    assert config._split_csv(None) == []


def test_resolve_path_relative_is_anchored_at_project_root() -> None:
    root = config._project_root().resolve()
    assert config._resolve_path("./data/x.sqlite") == str(root / "data" / "x.sqlite")


def test_resolve_path_outside_project_rejected() -> None:
    with pytest.raises(ValueError, match="Path traversal detected"):
        config._resolve_path("/tmp/example")


def test_env_int_invalid_value_returns_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_INT_INVALID", "not_a_number")
    assert config._env_int("TEST_INT_INVALID", 42) == 42


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = config.load_settings()

    assert settings.server.mode == "http"
    assert settings.server.port == 4000
    assert settings.server.history_page_size == 20
    assert settings.aws.default_region == "eu-central-1"
    assert settings.aws.available_regions == config.DEFAULT_REGIONS
    assert settings.slack.bot_token is None
    assert settings.dashboard.api_tokens == ()


def test_environment_overrides(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("AWS_DEFAULT_REGION", "US-EAST-1")
    clean_env.setenv("CHATOPS_AWS_REGIONS", "us-east-1, eu-west-1")
    clean_env.setenv("CHATOPS_HISTORY_PAGE_SIZE", "10")
    clean_env.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    clean_env.setenv("DASHBOARD_API_TOKENS", "one,two")
    clean_env.setenv("AWS_ACCESS_KEY_ID", "AKIAEXAMPLE")

    settings = config.load_settings()

    assert settings.aws.default_region == "us-east-1"
    assert settings.aws.available_regions == ("us-east-1", "eu-west-1")
    assert settings.aws.access_key_id_present is True
    assert settings.server.history_page_size == 10
    assert settings.slack.bot_token == "xoxb-test"
    assert settings.dashboard.api_tokens == ("one", "two")
    assert "xoxb-test" not in repr(settings.slack)


def test_aws_region_takes_precedence(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("AWS_REGION", "ap-southeast-2")
    clean_env.setenv("AWS_DEFAULT_REGION", "us-east-1")

    assert config.load_settings().aws.default_region == "ap-southeast-2"


def test_page_size_above_cap_is_invalid(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CHATOPS_HISTORY_PAGE_SIZE", "500")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_socket_mode_requires_app_token(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CHATOPS_MODE", "socket")

    with pytest.raises(RuntimeError, match="SLACK_APP_TOKEN is required"):
        config.load_settings()


def test_unknown_mode_is_invalid(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CHATOPS_MODE", "carrier-pigeon")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_settings_are_cached(clean_env: pytest.MonkeyPatch) -> None:
    assert config.load_settings() is config.load_settings()
