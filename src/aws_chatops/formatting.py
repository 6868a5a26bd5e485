"""Render command results as Slack replies.

Everything here is pure: a :class:`CommandResult` goes in, a :class:`Reply`
with fallback text and optional Block Kit blocks comes out.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from aws_chatops.config import REGION_LABELS
from aws_chatops.domain.actions import (
    REGION_SELECT_ACTION_ID,
    ActionToken,
    is_valid_instance_id,
    is_valid_region,
)
from aws_chatops.domain.commands import CommandKind, CommandResult, ErrorKind, PowerVerb

_ERROR_PREFIX = {
    ErrorKind.RESOURCE_CONFLICT: "⚠️",
    ErrorKind.RESOURCE_NOT_FOUND: "⚠️",
    ErrorKind.AUTHORIZATION: "🚨",
    ErrorKind.UNRECOGNIZED: "🤔",
}

_SUCCESS_PREFIX = {
    CommandKind.CREATE_BUCKET: "✅ Success!",
    CommandKind.STOP_INSTANCE: "✅ Success!",
    CommandKind.REBOOT_INSTANCE: "✅ Success!",
}


@dataclass(frozen=True)
class Reply:
    text: str
    blocks: list[dict[str, Any]] = field(default_factory=list)

    def as_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"text": self.text}
        if self.blocks:
            message["blocks"] = self.blocks
        return message


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _mrkdwn(text: str) -> dict[str, Any]:
    return {"type": "mrkdwn", "text": text}


def _header(text: str) -> dict[str, Any]:
    return {"type": "header", "text": _plain(text)}


_DIVIDER = {"type": "divider"}


def render(
    result: CommandResult,
    kind: CommandKind | None = None,
    *,
    regions: Sequence[str] = (),
) -> Reply:
    """Turn ``result`` into a reply; ``regions`` feeds the region picker."""
    if not result.success:
        prefix = _ERROR_PREFIX.get(result.error_kind, "❌")
        return Reply(text=f"{prefix} {result.message}")

    if kind is CommandKind.SHOW_INSTANCES and regions:
        return region_menu(list(regions), result.message)
    if kind is CommandKind.LIST_BUCKETS and result.data:
        return bucket_list(result.data)
    if kind is CommandKind.LIST_INSTANCES and result.data:
        return instance_list(result.data)

    prefix = _SUCCESS_PREFIX.get(kind) if kind is not None else None
    return Reply(text=f"{prefix} {result.message}" if prefix else result.message)


def bucket_list(buckets: list[dict[str, str]]) -> Reply:
    blocks: list[dict[str, Any]] = [
        _header(f"Found {len(buckets)} S3 Buckets 📁"),
        _DIVIDER,
    ]
    for bucket in buckets:
        blocks.append(
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Name:*\n`{bucket['name']}`"),
                    _mrkdwn(f"*Created On:*\n{bucket['created']}"),
                ],
            }
        )
    return Reply(text="List of S3 buckets:", blocks=blocks)


def _power_buttons(instance_id: str, region: str) -> dict[str, Any]:
    return {
        "type": "actions",
        "elements": [
            {
                "type": "button",
                "text": _plain("🛑 Stop Instance"),
                "style": "danger",
                "action_id": ActionToken(PowerVerb.STOP, instance_id, region).encode(),
            },
            {
                "type": "button",
                "text": _plain("🔄 Reboot Instance"),
                "style": "primary",
                "action_id": ActionToken(PowerVerb.REBOOT, instance_id, region).encode(),
            },
        ],
    }


def _encodable(instance: dict[str, str]) -> bool:
    return is_valid_instance_id(instance["instance_id"]) and is_valid_region(instance["region"])


def instance_list(instances: list[dict[str, str]]) -> Reply:
    region = instances[0]["region"]
    blocks: list[dict[str, Any]] = [
        _header(f"Found {len(instances)} EC2 Instances in {region} 🖥️"),
        _DIVIDER,
    ]
    for instance in instances:
        blocks.append(
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Name:* {instance['name']}"),
                    _mrkdwn(f"*State:* {instance['state']}"),
                    _mrkdwn(f"*ID:* `{instance['instance_id']}`"),
                    _mrkdwn(f"*Type:* {instance['instance_type']}"),
                ],
            }
        )
        if instance["state"] == "running" and _encodable(instance):
            blocks.append(_power_buttons(instance["instance_id"], instance["region"]))
        blocks.append(_DIVIDER)
    return Reply(text=f"List of EC2 instances in {region}:", blocks=blocks)


def region_menu(regions: list[str], text: str) -> Reply:
    options = [
        {
            "text": _plain(
                f"{REGION_LABELS[region]} - {region}" if region in REGION_LABELS else region
            ),
            "value": region,
        }
        for region in regions
    ]
    blocks = [
        {
            "type": "section",
            "text": _mrkdwn("🌐 *Please select the AWS region to check:*"),
            "accessory": {
                "type": "static_select",
                "placeholder": _plain("Select a region..."),
                "action_id": REGION_SELECT_ACTION_ID,
                "options": options,
            },
        }
    ]
    return Reply(text=text, blocks=blocks)
