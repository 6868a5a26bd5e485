"""Configuration management for the AWS ChatOps console."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

_config_logger = logging.getLogger(__name__)

DEFAULT_REGIONS: tuple[str, ...] = (
    "eu-central-1",
    "us-east-1",
    "eu-west-1",
    "ap-southeast-2",
)

REGION_LABELS: dict[str, str] = {
    "eu-central-1": "Europe (Frankfurt)",
    "us-east-1": "US East (N. Virginia)",
    "eu-west-1": "Europe (Ireland)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
}


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ExecutionSettings(BaseModel):
    sdk_timeout_seconds: int = Field(default=30, ge=1, le=300)
    max_retries: int = Field(default=2, ge=0, le=10)


class StorageSettings(BaseModel):
    sqlite_path: str = Field(default="./data/chatops.sqlite")
    sqlite_wal: bool = Field(default=True)


class PolicySettings(BaseModel):
    path: str = Field(default="./policy.yaml")


class AWSSettings(BaseModel):
    default_region: str = Field(default="eu-central-1")
    default_profile: str | None = Field(default=None)
    access_key_id_present: bool = Field(
        default=False,
        description="True when static IAM keys are configured in the environment.",
    )
    available_regions: tuple[str, ...] = Field(default=DEFAULT_REGIONS)

    @field_validator("default_region")
    @classmethod
    def _lowercase_region(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("available_regions")
    @classmethod
    def _validate_regions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        regions = tuple(r.strip().lower() for r in value if r.strip())
        if not regions:
            raise ValueError("available_regions must not be empty")
        return regions


class SlackSettings(BaseModel):
    bot_token: str | None = Field(default=None, repr=False)
    app_token: str | None = Field(default=None, repr=False)
    signing_secret: str | None = Field(default=None, repr=False)


class DashboardSettings(BaseModel):
    api_tokens: tuple[str, ...] = Field(default=(), repr=False)


class ServerSettings(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=4000, ge=1024, le=65535)
    mode: Literal["http", "socket"] = Field(default="http")
    history_page_size: int = Field(default=20, ge=1, le=50)
    http_allowed_origins: tuple[str, ...] = Field(default=())
    http_enable_cors: bool = Field(default=False)


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)


ENV_KEYS = {
    "mode": "CHATOPS_MODE",
    "host": "CHATOPS_HOST",
    "port": "PORT",
    "history_page_size": "CHATOPS_HISTORY_PAGE_SIZE",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "sqlite_path": "SQLITE_PATH",
    "policy_path": "POLICY_PATH",
    "aws_region": "AWS_REGION",
    "aws_default_region": "AWS_DEFAULT_REGION",
    "aws_profile": "AWS_PROFILE",
    "aws_access_key_id": "AWS_ACCESS_KEY_ID",
    "aws_regions": "CHATOPS_AWS_REGIONS",
    "max_retries": "CHATOPS_AWS_MAX_RETRIES",
    "slack_bot_token": "SLACK_BOT_TOKEN",
    "slack_app_token": "SLACK_APP_TOKEN",
    "slack_signing_secret": "SLACK_SIGNING_SECRET",
    "dashboard_tokens": "DASHBOARD_API_TOKENS",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    root = _project_root().resolve()
    if candidate.is_absolute():
        resolved = candidate.resolve()
    else:
        resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_optional(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip() or None


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = os.getenv(ENV_KEYS["log_file"])
    regions = _split_csv(os.getenv(ENV_KEYS["aws_regions"]))

    settings_data: dict[str, object] = {
        "server": {
            "host": os.getenv(ENV_KEYS["host"], ServerSettings().host),
            "port": _env_int(ENV_KEYS["port"], ServerSettings().port),
            "mode": os.getenv(ENV_KEYS["mode"], ServerSettings().mode).strip().lower(),
            "history_page_size": _env_int(
                ENV_KEYS["history_page_size"], ServerSettings().history_page_size
            ),
            "http_allowed_origins": tuple(_split_csv(os.getenv("HTTP_ALLOWED_ORIGINS"))),
            "http_enable_cors": _env_bool("HTTP_ENABLE_CORS", ServerSettings().http_enable_cors),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
        "execution": {
            "sdk_timeout_seconds": _env_int(
                "SDK_TIMEOUT_SECONDS",
                ExecutionSettings().sdk_timeout_seconds,
            ),
            "max_retries": _env_int(ENV_KEYS["max_retries"], ExecutionSettings().max_retries),
        },
        "storage": {
            "sqlite_path": _resolve_path(
                os.getenv(ENV_KEYS["sqlite_path"], StorageSettings().sqlite_path)
            ),
            "sqlite_wal": _env_bool("SQLITE_WAL", StorageSettings().sqlite_wal),
        },
        "policy": {
            "path": _resolve_path(os.getenv(ENV_KEYS["policy_path"], PolicySettings().path)),
        },
        "aws": {
            "default_region": (
                _env_optional(ENV_KEYS["aws_region"])
                or _env_optional(ENV_KEYS["aws_default_region"])
                or AWSSettings().default_region
            ),
            "default_profile": _env_optional(ENV_KEYS["aws_profile"]),
            "access_key_id_present": bool(_env_optional(ENV_KEYS["aws_access_key_id"])),
            "available_regions": tuple(regions) if regions else DEFAULT_REGIONS,
        },
        "slack": {
            "bot_token": _env_optional(ENV_KEYS["slack_bot_token"]),
            "app_token": _env_optional(ENV_KEYS["slack_app_token"]),
            "signing_secret": _env_optional(ENV_KEYS["slack_signing_secret"]),
        },
        "dashboard": {
            "api_tokens": tuple(_split_csv(os.getenv(ENV_KEYS["dashboard_tokens"]))),
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    if settings.server.mode == "socket" and not settings.slack.app_token:
        raise RuntimeError("Invalid configuration: SLACK_APP_TOKEN is required for CHATOPS_MODE=socket")

    Path(settings.storage.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    return settings
