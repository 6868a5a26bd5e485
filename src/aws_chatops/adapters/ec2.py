"""EC2 instance operations."""

from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from aws_chatops.adapters.errors import (
    MALFORMED_RESPONSE_ERRORS,
    aws_error_suffix,
    classify,
    malformed_response_message,
)
from aws_chatops.domain.commands import CommandResult, ErrorKind, PowerVerb
from aws_chatops.execution.aws_client import (
    ClientFactory,
    call_aws_api_async,
    paginate_async,
)

logger = logging.getLogger(__name__)

_AWS_ERRORS = (ClientError, BotoCoreError)

NO_NAME_TAG = "No Name Tag"

_POWER_METHODS = {
    PowerVerb.STOP: "stop_instances",
    PowerVerb.REBOOT: "reboot_instances",
}


def instance_name(instance: dict) -> str:
    for tag in instance.get("Tags") or []:
        if tag.get("Key") == "Name" and tag.get("Value"):
            return tag["Value"]
    return NO_NAME_TAG


def flatten_reservations(reservations: list[dict], region: str) -> list[dict[str, str]]:
    instances: list[dict[str, str]] = []
    for reservation in reservations:
        for instance in reservation.get("Instances") or []:
            instances.append(
                {
                    "instance_id": instance["InstanceId"],
                    "name": instance_name(instance),
                    "state": (instance.get("State") or {}).get("Name", "unknown"),
                    "instance_type": instance.get("InstanceType", "unknown"),
                    "region": region,
                }
            )
    return instances


class EC2Adapter:
    def __init__(self, get_client: ClientFactory) -> None:
        self._get_client = get_client

    async def list_instances(self, region: str) -> CommandResult:
        try:
            client = self._get_client("ec2", region)
            reservations = await paginate_async(client, "describe_instances", "Reservations")
            instances = flatten_reservations(reservations, region)
        except _AWS_ERRORS as exc:
            logger.warning("Describing instances in %s failed: %s", region, exc)
            return CommandResult.fail(
                classify(exc),
                f"An error occurred while fetching instances in region *{region}*.\n"
                f"{aws_error_suffix(exc)}",
            )
        except MALFORMED_RESPONSE_ERRORS as exc:
            logger.exception("Unexpected DescribeInstances response in %s", region)
            return CommandResult.fail(
                ErrorKind.ADAPTER_FAILURE, malformed_response_message("DescribeInstances", exc)
            )

        if not instances:
            return CommandResult.ok(f"No EC2 instances found in the *{region}* region.")
        return CommandResult.ok(
            f"Found {len(instances)} EC2 instances in {region}.", data=instances
        )

    async def set_instance_power(
        self, instance_id: str, region: str, verb: PowerVerb
    ) -> CommandResult:
        if not instance_id:
            return CommandResult.fail(ErrorKind.VALIDATION, "An instance id is required.")

        # No state pre-check: AWS decides what a stop on a stopped instance means.
        try:
            client = self._get_client("ec2", region)
            await call_aws_api_async(client, _POWER_METHODS[verb], InstanceIds=[instance_id])
        except _AWS_ERRORS as exc:
            logger.warning("Failed to %s %s in %s: %s", verb.value, instance_id, region, exc)
            return CommandResult.fail(
                classify(exc),
                f"Failed to *{verb.value}* instance `{instance_id}`.\n{aws_error_suffix(exc)}",
            )
        return CommandResult.ok(
            f"Instance `{instance_id}` was successfully requested to be *{verb.past_tense}*."
        )
