"""Interaction state carried in Slack action identifiers.

The bot keeps no server-side session between interaction steps. Everything
the next step needs is encoded into the ``action_id`` of the button the user
clicks, so the token must decode back to exactly what was encoded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from aws_chatops.domain.commands import PowerVerb

REGION_SELECT_ACTION_ID = "ec2_region_select"
ACTION_PREFIX = "ec2"
DELIMITER = "_"

INSTANCE_ID_PATTERN = re.compile(r"^i-[0-9a-f]{8,17}$")
REGION_PATTERN = re.compile(r"^[a-z]{2}(?:-gov|-iso[a-z]?)?-[a-z]+-\d+$")

ACTION_ID_PATTERN = re.compile(
    r"^ec2_(stop|reboot)_(i-[0-9a-f]{8,17})_([a-z]{2}(?:-gov|-iso[a-z]?)?-[a-z]+-\d+)$"
)


class InvalidActionToken(ValueError):
    """Raised when an action identifier cannot be decoded."""


def is_valid_instance_id(value: str) -> bool:
    return bool(INSTANCE_ID_PATTERN.match(value))


def is_valid_region(value: str) -> bool:
    return bool(REGION_PATTERN.match(value))


@dataclass(frozen=True)
class ActionToken:
    verb: PowerVerb
    instance_id: str
    region: str

    def __post_init__(self) -> None:
        if not isinstance(self.verb, PowerVerb):
            object.__setattr__(self, "verb", PowerVerb(self.verb))
        if not is_valid_instance_id(self.instance_id):
            raise ValueError(f"Instance id is not encodable: {self.instance_id!r}")
        if not is_valid_region(self.region):
            raise ValueError(f"Region is not encodable: {self.region!r}")

    def encode(self) -> str:
        return DELIMITER.join((ACTION_PREFIX, self.verb.value, self.instance_id, self.region))

    @classmethod
    def decode(cls, action_id: str) -> "ActionToken":
        match = ACTION_ID_PATTERN.match(action_id or "")
        if match is None:
            raise InvalidActionToken(f"Unrecognized action identifier: {action_id!r}")
        verb, instance_id, region = match.groups()
        return cls(PowerVerb(verb), instance_id, region)
