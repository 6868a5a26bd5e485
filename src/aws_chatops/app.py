"""Application context assembly."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from aws_chatops.adapters.ec2 import EC2Adapter
from aws_chatops.adapters.s3 import S3Adapter
from aws_chatops.audit.db import SqliteStore
from aws_chatops.audit.recorder import AuditRecorder
from aws_chatops.commands.dispatcher import CommandDispatcher
from aws_chatops.config import Settings, load_settings
from aws_chatops.execution.aws_client import get_client
from aws_chatops.interactive import InteractiveFlow
from aws_chatops.policy.engine import AllowAllPolicy, AuthorizationPolicy, PolicyEngine
from aws_chatops.policy.loader import load_policy
from aws_chatops.slack.bot import SlackBot

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application-wide dependency container.

    Initialized once at startup and cached for the lifetime of the process.
    """

    settings: Settings
    store: SqliteStore
    recorder: AuditRecorder
    policy: AuthorizationPolicy
    dispatcher: CommandDispatcher
    flow: InteractiveFlow
    slack_bot: SlackBot | None


def build_policy(settings: Settings) -> AuthorizationPolicy:
    if not Path(settings.policy.path).exists():
        logger.warning(
            "Policy file %s not found; every actor may run every command",
            settings.policy.path,
        )
        return AllowAllPolicy()
    return PolicyEngine(load_policy(settings.policy.path))


def build_slack_bot(
    settings: Settings, dispatcher: CommandDispatcher, flow: InteractiveFlow
) -> SlackBot | None:
    if not settings.slack.bot_token:
        logger.warning("SLACK_BOT_TOKEN is not set; Slack integration disabled")
        return None
    return SlackBot(
        bot_token=settings.slack.bot_token,
        dispatcher=dispatcher,
        flow=flow,
        signing_secret=settings.slack.signing_secret,
        app_token=settings.slack.app_token,
    )


@lru_cache(maxsize=1)
def get_app_context() -> AppContext:
    """Get or create the application context."""
    settings = load_settings()

    store = SqliteStore(settings.storage.sqlite_path, wal=settings.storage.sqlite_wal)
    recorder = AuditRecorder(store)
    policy = build_policy(settings)

    dispatcher = CommandDispatcher(
        s3=S3Adapter(get_client, default_region=settings.aws.default_region),
        ec2=EC2Adapter(get_client),
        recorder=recorder,
        policy=policy,
        default_region=settings.aws.default_region,
        available_regions=settings.aws.available_regions,
    )
    flow = InteractiveFlow(dispatcher)

    return AppContext(
        settings=settings,
        store=store,
        recorder=recorder,
        policy=policy,
        dispatcher=dispatcher,
        flow=flow,
        slack_bot=build_slack_bot(settings, dispatcher, flow),
    )
