"""Append-only command audit log used by the dispatcher and the dashboard."""

from __future__ import annotations

import asyncio
import logging

from aws_chatops.audit.db import SqliteStore
from aws_chatops.audit.models import AuditRecord

logger = logging.getLogger(__name__)


class AuditRecorder:
    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    async def record(self, entry: AuditRecord) -> None:
        """Persist ``entry``. Storage failures are logged and swallowed."""
        try:
            await asyncio.to_thread(self._store.append_record, entry)
        except Exception:
            logger.exception(
                "Failed to write audit record for actor=%s command=%r",
                entry.actor_id,
                entry.command_text,
            )

    async def query(self, limit: int) -> list[AuditRecord]:
        """Return up to ``limit`` records, newest first."""
        return await asyncio.to_thread(self._store.recent_records, limit)
