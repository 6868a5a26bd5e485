"""Data models for audit records."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class AuditRecord:
    actor_id: str
    command_text: str
    response_text: str
    success: bool
    timestamp: str
    id: int | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
