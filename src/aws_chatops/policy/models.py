"""Authorization policy configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from aws_chatops.domain.commands import CommandKind


def _ensure_list(v: Any) -> list:
    """Convert None to empty list, pass through lists."""
    if v is None:
        return []
    return v


class PolicyDefaults(BaseModel):
    allow_unlisted: bool = Field(
        default=True,
        description="Allow command kinds that have no entry under `commands`.",
    )


class PolicyRules(BaseModel):
    deny_actors: list[str] = Field(default_factory=list)

    @field_validator("deny_actors", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> list:
        return _ensure_list(v)


class CommandRule(BaseModel):
    allow_actors: list[str] = Field(default_factory=list)

    @field_validator("allow_actors", mode="before")
    @classmethod
    def _validate_lists(cls, v: Any) -> list:
        return _ensure_list(v)


class PolicyConfig(BaseModel):
    version: int = Field(default=1)
    defaults: PolicyDefaults = Field(default_factory=PolicyDefaults)
    rules: PolicyRules = Field(default_factory=PolicyRules)
    commands: dict[CommandKind, CommandRule] = Field(default_factory=dict)

    @field_validator("commands", mode="before")
    @classmethod
    def _validate_commands(cls, v: Any) -> dict:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: (val if val is not None else {}) for k, val in v.items()}
        return v

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "PolicyConfig":
        return cls.model_validate(data)
