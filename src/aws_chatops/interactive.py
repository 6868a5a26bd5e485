"""Multi-step EC2 flow driven by Slack interactive components.

``show ec2 instances`` posts a region menu (AwaitingRegionSelection).
Picking a region lists instances with Stop/Reboot buttons (InstancesListed).
Clicking a button runs the power action (PowerActionRequested, terminal).

Nothing is remembered between steps: the selected region and the button
``action_id`` carry all the state the next step needs.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from aws_chatops.commands.dispatcher import CommandDispatcher, ReplyChannel
from aws_chatops.domain.actions import (
    REGION_SELECT_ACTION_ID,
    ActionToken,
    InvalidActionToken,
    is_valid_region,
)
from aws_chatops.domain.commands import Command, CommandKind, CommandResult, ErrorKind
from aws_chatops.formatting import render

logger = logging.getLogger(__name__)

Ack = Callable[[], Awaitable[None]]


class FlowState(str, Enum):
    AWAITING_REGION_SELECTION = "AwaitingRegionSelection"
    INSTANCES_LISTED = "InstancesListed"
    POWER_ACTION_REQUESTED = "PowerActionRequested"
    REJECTED = "Rejected"


class InteractiveFlow:
    def __init__(self, dispatcher: CommandDispatcher) -> None:
        self._dispatcher = dispatcher

    async def on_region_selected(
        self,
        region: str,
        actor_id: str,
        ack: Ack,
        reply: ReplyChannel,
    ) -> FlowState:
        # Slack fails the interaction unless it is acknowledged within 3 seconds.
        await ack()

        region = (region or "").strip().lower()
        if not is_valid_region(region):
            logger.warning("Rejected region selection %r from %s", region, actor_id)
            await reply.send(
                render(CommandResult.fail(ErrorKind.VALIDATION, f"Unknown region `{region}`."))
            )
            return FlowState.REJECTED

        await reply.send(f"Checking EC2 instances in region *{region}*. One moment... 🕒")
        command = Command(
            kind=CommandKind.LIST_INSTANCES,
            params={"region": region},
            raw_text=f"{REGION_SELECT_ACTION_ID} {region}",
            actor_id=actor_id,
        )
        result = await self._dispatcher.execute(command)
        await reply.send(render(result, command.kind))
        return FlowState.INSTANCES_LISTED

    async def on_power_action(
        self,
        action_id: str,
        actor_id: str,
        ack: Ack,
        reply: ReplyChannel,
    ) -> FlowState:
        await ack()

        try:
            token = ActionToken.decode(action_id)
        except InvalidActionToken as exc:
            logger.warning("Rejected action %r from %s: %s", action_id, actor_id, exc)
            await reply.send(
                render(
                    CommandResult.fail(
                        ErrorKind.VALIDATION, f"This button is no longer valid: `{action_id}`."
                    )
                )
            )
            return FlowState.REJECTED

        await reply.send(
            f"🤖 <@{actor_id}>, attempting to *{token.verb.value}* instance "
            f"`{token.instance_id}` in region *{token.region}*..."
        )
        command = Command(
            kind=token.verb.command_kind,
            params={"instance_id": token.instance_id, "region": token.region},
            raw_text=action_id,
            actor_id=actor_id,
        )
        result = await self._dispatcher.execute(command)
        await reply.send(render(result, command.kind))
        return FlowState.POWER_ACTION_REQUESTED
