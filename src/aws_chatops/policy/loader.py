"""Read the actor policy file."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from aws_chatops.policy.models import PolicyConfig

logger = logging.getLogger(__name__)


def load_policy(path: str) -> PolicyConfig:
    """Parse ``path`` into a :class:`PolicyConfig`.

    An empty file yields the defaults. Malformed YAML, or a document that is
    not a mapping, raises ``ValueError`` naming the file.
    """
    policy_path = Path(path)
    if not policy_path.exists():
        raise FileNotFoundError(f"Policy file not found: {policy_path}")

    try:
        document = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Policy file {policy_path} is not valid YAML: {exc}") from exc

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValueError(
            f"Policy file {policy_path} must contain a mapping, got {type(document).__name__}"
        )

    config = PolicyConfig.from_yaml(document)
    logger.info(
        "Loaded policy from %s: %d deny rule(s), %d command rule(s)",
        policy_path,
        len(config.rules.deny_actors),
        len(config.commands),
    )
    return config
