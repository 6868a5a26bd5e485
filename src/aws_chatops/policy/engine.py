"""Authorization hook and its policy-file implementation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from aws_chatops.domain.commands import CommandKind
from aws_chatops.policy.models import PolicyConfig

_MAX_POLICY_REGEX_LENGTH = 256
_BACKREFERENCE_PATTERN = re.compile(r"\\[1-9]")
_NESTED_QUANTIFIER_PATTERN = re.compile(
    r"\((?:[^()\\]|\\.)*[+*](?:[^()\\]|\\.)*\)\s*(?:[+*]|\{\d+(?:,\d*)?\})"
)
_LOOKBEHIND_TOKENS = ("(?<=", "(?<!")


class AuthorizationPolicy(Protocol):
    def is_authorized(self, actor_id: str, kind: CommandKind) -> bool: ...


class AllowAllPolicy:
    """Permits every actor to run every command."""

    def is_authorized(self, actor_id: str, kind: CommandKind) -> bool:
        return True


@dataclass
class PolicyDecision:
    allowed: bool
    reasons: list[str]


class PolicyEngine:
    def __init__(self, config: PolicyConfig) -> None:
        self._config = config
        self._deny_patterns = self._compile_patterns(config.rules.deny_actors, "deny")
        self._allow_patterns = {
            kind: self._compile_patterns(rule.allow_actors, f"allow:{kind.value}")
            for kind, rule in config.commands.items()
        }

    @classmethod
    def _compile_patterns(cls, patterns: list[str], label: str) -> list[re.Pattern[str]]:
        compiled: list[re.Pattern[str]] = []
        for pat in patterns:
            cls._validate_pattern_safety(pat, label)
            try:
                compiled.append(re.compile(pat))
            except re.error as exc:
                raise ValueError(f"Invalid regex in {label} policy pattern '{pat}': {exc}") from exc
        return compiled

    @staticmethod
    def _validate_pattern_safety(pattern: str, label: str) -> None:
        if len(pattern) > _MAX_POLICY_REGEX_LENGTH:
            raise ValueError(
                f"Unsafe regex in {label} policy pattern '{pattern}': exceeds "
                f"{_MAX_POLICY_REGEX_LENGTH} characters"
            )
        if any(token in pattern for token in _LOOKBEHIND_TOKENS):
            raise ValueError(
                f"Unsafe regex in {label} policy pattern '{pattern}': look-behind is not allowed"
            )
        if _BACKREFERENCE_PATTERN.search(pattern):
            raise ValueError(
                f"Unsafe regex in {label} policy pattern '{pattern}': "
                "backreferences are not allowed"
            )
        if _NESTED_QUANTIFIER_PATTERN.search(pattern):
            raise ValueError(
                f"Unsafe regex in {label} policy pattern '{pattern}': "
                "nested quantifiers are not allowed"
            )

    def evaluate(self, actor_id: str, kind: CommandKind) -> PolicyDecision:
        deny_match = self._matches(self._deny_patterns, actor_id)
        if deny_match:
            return PolicyDecision(False, [f"Actor denied by policy rule: {deny_match}"])

        allow_patterns = self._allow_patterns.get(kind)
        if allow_patterns is None:
            if self._config.defaults.allow_unlisted:
                return PolicyDecision(True, [])
            return PolicyDecision(False, [f"No policy entry for {kind.value}"])

        allow_match = self._matches(allow_patterns, actor_id)
        if not allow_match:
            return PolicyDecision(False, [f"Actor is not allowlisted for {kind.value}"])
        return PolicyDecision(True, [f"Allowed by policy rule: {allow_match}"])

    def is_authorized(self, actor_id: str, kind: CommandKind) -> bool:
        return self.evaluate(actor_id, kind).allowed

    def _matches(self, patterns: list[re.Pattern[str]], actor_id: str) -> str | None:
        for pattern in patterns:
            if pattern.search(actor_id):
                return pattern.pattern
        return None
