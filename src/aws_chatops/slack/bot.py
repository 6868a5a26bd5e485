"""Slack Bolt wiring for the ChatOps dispatcher and interactive flow."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.adapter.starlette.async_handler import AsyncSlackRequestHandler
from slack_bolt.async_app import AsyncApp

from aws_chatops.commands.dispatcher import CommandDispatcher
from aws_chatops.domain.actions import REGION_SELECT_ACTION_ID
from aws_chatops.formatting import Reply
from aws_chatops.interactive import InteractiveFlow

logger = logging.getLogger(__name__)

POWER_ACTION_PATTERN = re.compile(r"^ec2_(stop|reboot)_.+$")


class SayReplyChannel:
    """Replies through Bolt's ``say`` helper (same channel as the event)."""

    def __init__(self, say: Callable) -> None:
        self._say = say

    async def send(self, content: str | Reply) -> None:
        if isinstance(content, Reply):
            await self._say(**content.as_message())
        else:
            await self._say(text=content)


class ChannelReplyChannel:
    """Replies with ``chat.postMessage`` to an explicit channel."""

    def __init__(self, client: Any, channel_id: str) -> None:
        self._client = client
        self._channel_id = channel_id

    async def send(self, content: str | Reply) -> None:
        message = content.as_message() if isinstance(content, Reply) else {"text": content}
        await self._client.chat_postMessage(channel=self._channel_id, **message)


def should_ignore_message(event: dict, bot_user_id: Optional[str] = None) -> bool:
    """Thread replies, edits/joins (any subtype) and bot posts are not commands.

    Messages that open by mentioning ``bot_user_id`` are skipped too: Slack
    delivers those again as ``app_mention`` events.
    """
    if event.get("bot_id") or event.get("subtype") or event.get("thread_ts"):
        return True
    text = (event.get("text") or "").strip()
    if not text:
        return True
    if bot_user_id:
        return text.startswith((f"<@{bot_user_id}>", f"<@{bot_user_id}|"))
    return False


class SlackBot:
    """Slack bot exposing the command dispatcher."""

    def __init__(
        self,
        bot_token: str,
        dispatcher: CommandDispatcher,
        flow: InteractiveFlow,
        signing_secret: Optional[str] = None,
        app_token: Optional[str] = None,
    ):
        """Initialize Slack bot.

        Args:
            bot_token: Slack bot OAuth token (xoxb-...).
            dispatcher: Executes text commands.
            flow: Handles region menu and instance button interactions.
            signing_secret: Request signing secret for HTTP event delivery.
            app_token: App-level token (xapp-...) for Socket Mode.
        """
        self.app_token = app_token
        self.dispatcher = dispatcher
        self.flow = flow

        self.app = AsyncApp(token=bot_token, signing_secret=signing_secret)
        self._setup_handlers()

        self._handler: Optional[AsyncSocketModeHandler] = None

    def _setup_handlers(self) -> None:
        """Set up Slack event and action handlers."""

        @self.app.event("app_mention")
        async def handle_mention(event: dict, say: Callable) -> None:
            user = event.get("user", "unknown")
            logger.info("Mentioned by %s: %s", user, event.get("text", ""))
            await self.dispatcher.handle_inbound(
                event.get("text", ""), user, SayReplyChannel(say)
            )

        @self.app.event("message")
        async def handle_message(event: dict, say: Callable, context: dict) -> None:
            if should_ignore_message(event, context.get("bot_user_id")):
                return
            user = event.get("user", "unknown")
            logger.info("Received message from %s: %s", user, event.get("text", ""))
            await self.dispatcher.handle_inbound(
                event.get("text", ""), user, SayReplyChannel(say)
            )

        @self.app.action(REGION_SELECT_ACTION_ID)
        async def handle_region_select(ack: Callable, body: dict, client: Any) -> None:
            selected = body["actions"][0].get("selected_option") or {}
            await self.flow.on_region_selected(
                selected.get("value", ""),
                body["user"]["id"],
                ack,
                ChannelReplyChannel(client, body["channel"]["id"]),
            )

        @self.app.action(POWER_ACTION_PATTERN)
        async def handle_power_action(ack: Callable, body: dict, action: dict, client: Any) -> None:
            await self.flow.on_power_action(
                action["action_id"],
                body["user"]["id"],
                ack,
                ChannelReplyChannel(client, body["channel"]["id"]),
            )

    def request_handler(self) -> AsyncSlackRequestHandler:
        """Starlette adapter for HTTP event delivery."""
        return AsyncSlackRequestHandler(self.app)

    async def start(self) -> None:
        """Start the Slack bot in Socket Mode."""
        if not self.app_token:
            raise RuntimeError("SLACK_APP_TOKEN is required for Socket Mode")
        logger.info("Starting Slack bot in Socket Mode...")
        self._handler = AsyncSocketModeHandler(self.app, self.app_token)
        await self._handler.connect_async()

    async def stop(self) -> None:
        """Stop the Slack bot."""
        if self._handler:
            logger.info("Stopping Slack bot...")
            await self._handler.close_async()
