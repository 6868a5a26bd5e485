"""Command grammar: ordered text patterns mapped to command kinds."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from aws_chatops.domain.commands import Command, CommandKind

# (normalized_text, original_text) -> params, or None when the pattern does not apply
Detector = Callable[[str, str], dict[str, str] | None]

_MENTION_PATTERN = re.compile(r"^\s*<@[A-Z0-9]+(?:\|[^>]*)?>[\s:,]*")

_CREATE_BUCKET = re.compile(
    r"create bucket (\S+)(?:\s+in(?:\s+region)?)?\s+(\S+)(?:\s+with versioning enabled)?",
    re.IGNORECASE,
)
_BUCKET_INFO = re.compile(r"\b(?:bucket\s+)?info\b(.*)$", re.IGNORECASE)
_POWER_ACTION = re.compile(
    r"\b(stop|reboot)\s+instance\s+(\S+)(?:\s+in(?:\s+region)?\s+(\S+))?",
    re.IGNORECASE,
)
_REGION_SUFFIX = re.compile(r"\bin(?:\s+region)?\s+([a-z0-9-]+)$", re.IGNORECASE)

VERSIONING_CLAUSE = "with versioning enabled"


@dataclass(frozen=True)
class CommandPattern:
    kind: CommandKind
    detect: Detector


def _contains_any(*needles: str) -> Detector:
    def detect(normalized: str, original: str) -> dict[str, str] | None:
        if any(needle in normalized for needle in needles):
            return {}
        return None

    return detect


def _detect_create_bucket(normalized: str, original: str) -> dict[str, str] | None:
    found = _CREATE_BUCKET.search(original)
    if found is None:
        return None
    name, region = found.group(1), found.group(2).lower()
    # Checked against the whole text so the flag survives a short capture.
    versioning = VERSIONING_CLAUSE in normalized
    return {"name": name, "region": region, "versioning": "true" if versioning else "false"}


def _detect_bucket_info(normalized: str, original: str) -> dict[str, str] | None:
    found = _BUCKET_INFO.search(original)
    if found is None:
        return None
    name = found.group(1).strip()
    if not name:
        return None
    return {"name": name}


def _detect_power_action(normalized: str, original: str) -> dict[str, str] | None:
    found = _POWER_ACTION.search(original)
    if found is None:
        return None
    params = {"verb": found.group(1).lower(), "instance_id": found.group(2)}
    if found.group(3):
        params["region"] = found.group(3).lower()
    return params


def _detect_list_instances(normalized: str, original: str) -> dict[str, str] | None:
    if not any(needle in normalized for needle in ("list ec2", "ec2 status", "list instances")):
        return None
    found = _REGION_SUFFIX.search(original)
    if found is None:
        return {}
    return {"region": found.group(1).lower()}


def _only(verb: str) -> Detector:
    def detect(normalized: str, original: str) -> dict[str, str] | None:
        params = _detect_power_action(normalized, original)
        if params is None or params["verb"] != verb:
            return None
        params.pop("verb")
        return params

    return detect


COMMAND_PATTERNS: tuple[CommandPattern, ...] = (
    CommandPattern(CommandKind.CREATE_BUCKET, _detect_create_bucket),
    CommandPattern(CommandKind.BUCKET_INFO, _detect_bucket_info),
    CommandPattern(CommandKind.LIST_BUCKETS, _contains_any("list s3", "list buckets")),
    CommandPattern(CommandKind.SHOW_INSTANCES, _contains_any("show ec2 instances")),
    CommandPattern(CommandKind.STOP_INSTANCE, _only("stop")),
    CommandPattern(CommandKind.REBOOT_INSTANCE, _only("reboot")),
    CommandPattern(CommandKind.LIST_INSTANCES, _detect_list_instances),
    CommandPattern(CommandKind.GREETING, _contains_any("hello")),
    CommandPattern(CommandKind.HELP, _contains_any("help", "pomoc")),
)


def strip_mention(text: str) -> str:
    """Remove a leading ``<@U123>`` user mention from message text."""
    return _MENTION_PATTERN.sub("", text or "", count=1).strip()


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def match(
    text: str,
    *,
    actor_id: str = "",
    patterns: tuple[CommandPattern, ...] = COMMAND_PATTERNS,
) -> Command:
    """Resolve free text to a :class:`Command`.

    Patterns are tried in order and the first hit wins. Never raises:
    unmatched input becomes an ``Unknown`` command echoing the text.
    """
    original = _collapse_whitespace(text or "")
    normalized = original.lower()
    for pattern in patterns:
        params = pattern.detect(normalized, original)
        if params is not None:
            return Command(kind=pattern.kind, params=params, raw_text=original, actor_id=actor_id)
    return Command(
        kind=CommandKind.UNKNOWN,
        params={"originalText": original},
        raw_text=original,
        actor_id=actor_id,
    )
