"""Command dispatcher: authorize, execute, audit and reply."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from aws_chatops.adapters.ec2 import EC2Adapter
from aws_chatops.adapters.s3 import S3Adapter
from aws_chatops.audit.models import AuditRecord
from aws_chatops.audit.recorder import AuditRecorder
from aws_chatops.commands.grammar import match, strip_mention
from aws_chatops.domain.commands import (
    Command,
    CommandKind,
    CommandResult,
    ErrorKind,
    PowerVerb,
)
from aws_chatops.formatting import Reply, render
from aws_chatops.policy.engine import AuthorizationPolicy
from aws_chatops.utils.time import utc_now_iso

logger = logging.getLogger(__name__)

HELP_TEXT = "\n".join(
    [
        "*Available commands:*",
        "• `list s3 buckets` / `list buckets`: list all S3 buckets",
        "• `bucket info <name>`: show region, versioning and encryption of a bucket",
        "• `create bucket <name> in region <region> [with versioning enabled]`",
        "• `list ec2 instances [in <region>]` / `ec2 status`: list EC2 instances",
        "• `show ec2 instances`: pick a region and manage instances with buttons",
        "• `stop instance <id> [in region <region>]`",
        "• `reboot instance <id> [in region <region>]`",
        "• `hello`: say hi",
        "• `help` / `pomoc`: show this message",
    ]
)


class ReplyChannel(Protocol):
    async def send(self, content: str | Reply) -> None: ...


Handler = Callable[[Command], Awaitable[CommandResult]]


class CommandDispatcher:
    def __init__(
        self,
        s3: S3Adapter,
        ec2: EC2Adapter,
        recorder: AuditRecorder,
        policy: AuthorizationPolicy,
        default_region: str,
        available_regions: Sequence[str],
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self._s3 = s3
        self._ec2 = ec2
        self._recorder = recorder
        self._policy = policy
        self._default_region = default_region
        self._available_regions = tuple(available_regions)
        self._clock = clock
        self._handlers: dict[CommandKind, Handler] = {
            CommandKind.LIST_BUCKETS: self._list_buckets,
            CommandKind.CREATE_BUCKET: self._create_bucket,
            CommandKind.BUCKET_INFO: self._bucket_info,
            CommandKind.LIST_INSTANCES: self._list_instances,
            CommandKind.SHOW_INSTANCES: self._show_instances,
            CommandKind.STOP_INSTANCE: self._stop_instance,
            CommandKind.REBOOT_INSTANCE: self._reboot_instance,
            CommandKind.GREETING: self._greeting,
            CommandKind.HELP: self._help,
            CommandKind.UNKNOWN: self._unknown,
        }

    async def handle_inbound(self, raw_text: str, actor_id: str, reply: ReplyChannel) -> None:
        """Full round trip for one chat message. Failures are logged, not raised."""
        try:
            text = strip_mention(raw_text)
            await reply.send(f"🤖 <@{actor_id}>, processing `{text}`... ⏳")
            command = match(text, actor_id=actor_id)
            logger.info("Actor %s issued %s: %r", actor_id, command.kind.value, command.raw_text)
            result = await self.execute(command)
            await reply.send(render(result, command.kind, regions=self._available_regions))
        except Exception:
            logger.exception("Failed to handle message from %s", actor_id)

    async def execute(self, command: Command) -> CommandResult:
        """Run ``command`` and write exactly one audit record for it."""
        try:
            result = await self._run(command)
        except Exception as exc:
            logger.exception("Unhandled error while executing %s", command.kind.value)
            result = CommandResult.fail(
                ErrorKind.ADAPTER_FAILURE,
                f"Unexpected error while executing `{command.raw_text}`: "
                f"{type(exc).__name__}: {exc}",
            )
        await self._recorder.record(
            AuditRecord(
                actor_id=command.actor_id,
                command_text=command.raw_text,
                response_text=result.message,
                success=result.success,
                timestamp=self._clock(),
            )
        )
        return result

    async def _run(self, command: Command) -> CommandResult:
        if not self._policy.is_authorized(command.actor_id, command.kind):
            logger.warning("Actor %s denied for %s", command.actor_id, command.kind.value)
            return CommandResult.fail(
                ErrorKind.AUTHORIZATION,
                f"Sorry <@{command.actor_id}>, you are not authorized to run "
                f"{command.kind.value} commands.",
            )
        return await self._handlers[command.kind](command)

    async def _list_buckets(self, command: Command) -> CommandResult:
        return await self._s3.list_buckets()

    async def _create_bucket(self, command: Command) -> CommandResult:
        return await self._s3.create_bucket(
            command.param("name"),
            command.param("region"),
            enable_versioning=command.param("versioning") == "true",
        )

    async def _bucket_info(self, command: Command) -> CommandResult:
        return await self._s3.bucket_info(command.param("name"))

    async def _list_instances(self, command: Command) -> CommandResult:
        return await self._ec2.list_instances(command.param("region", self._default_region))

    async def _show_instances(self, command: Command) -> CommandResult:
        return CommandResult.ok(
            f"Hello <@{command.actor_id}>, please choose the AWS region to check "
            "for EC2 instances.",
        )

    async def _power(self, command: Command, verb: PowerVerb) -> CommandResult:
        return await self._ec2.set_instance_power(
            command.param("instance_id"),
            command.param("region", self._default_region),
            verb,
        )

    async def _stop_instance(self, command: Command) -> CommandResult:
        return await self._power(command, PowerVerb.STOP)

    async def _reboot_instance(self, command: Command) -> CommandResult:
        return await self._power(command, PowerVerb.REBOOT)

    async def _greeting(self, command: Command) -> CommandResult:
        return CommandResult.ok(f"Hi <@{command.actor_id}>! 👋 Ready for action!")

    async def _help(self, command: Command) -> CommandResult:
        return CommandResult.ok(HELP_TEXT)

    async def _unknown(self, command: Command) -> CommandResult:
        return CommandResult.fail(
            ErrorKind.UNRECOGNIZED,
            f"I don't recognize `{command.param('originalText')}`. "
            "Try `help` to see what I can do.",
        )
