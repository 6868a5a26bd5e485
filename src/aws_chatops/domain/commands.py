"""Domain objects for parsed commands and their outcomes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class CommandKind(str, Enum):
    LIST_BUCKETS = "ListBuckets"
    CREATE_BUCKET = "CreateBucket"
    BUCKET_INFO = "BucketInfo"
    LIST_INSTANCES = "ListInstances"
    SHOW_INSTANCES = "ShowInstances"
    STOP_INSTANCE = "StopInstance"
    REBOOT_INSTANCE = "RebootInstance"
    GREETING = "Greeting"
    HELP = "Help"
    UNKNOWN = "Unknown"


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    AUTHORIZATION = "AuthorizationError"
    RESOURCE_CONFLICT = "ResourceConflict"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    ADAPTER_FAILURE = "AdapterFailure"
    UNRECOGNIZED = "Unrecognized"


class PowerVerb(str, Enum):
    STOP = "stop"
    REBOOT = "reboot"

    @property
    def past_tense(self) -> str:
        return "stopped" if self is PowerVerb.STOP else "rebooted"

    @property
    def command_kind(self) -> CommandKind:
        if self is PowerVerb.STOP:
            return CommandKind.STOP_INSTANCE
        return CommandKind.REBOOT_INSTANCE


@dataclass(frozen=True)
class Command:
    """A parsed user intent. Immutable once produced."""

    kind: CommandKind
    params: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    raw_text: str = ""
    actor_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def param(self, key: str, default: str = "") -> str:
        return self.params.get(key, default)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of executing a command.

    A failed result always carries an ``error_kind``. ``data`` is only
    attached to successful results, and only as a list of records
    (buckets or instances).
    """

    success: bool
    message: str
    data: list[dict[str, Any]] | None = None
    error_kind: ErrorKind | None = None

    def __post_init__(self) -> None:
        if not self.success and self.error_kind is None:
            raise ValueError("A failed CommandResult requires an error_kind")
        if not self.success and self.data is not None:
            raise ValueError("Only successful results may carry data")
        if self.data is not None and not isinstance(self.data, list):
            raise ValueError("data must be a list of records")

    @classmethod
    def ok(cls, message: str, data: list[dict[str, Any]] | None = None) -> "CommandResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error_kind: ErrorKind, message: str) -> "CommandResult":
        return cls(success=False, message=message, error_kind=error_kind)
