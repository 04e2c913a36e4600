"""Draft persistence: a JSON list of drafts under a single storage key.

Reads are fail-soft (a broken list reads as empty). Writes log and drop
failures instead of raising.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import TypeAdapter

from geev.drafts.schemas import Draft
from geev.storage import KeyValueStorage
from geev.store.schemas import new_id, utcnow

logger = structlog.get_logger()

_DRAFT_LIST = TypeAdapter(list[Draft])


class DraftStore:
    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self._storage = storage
        self._key = key

    async def get_drafts(self) -> list[Draft]:
        try:
            raw = await self._storage.get(self._key)
            if not raw:
                return []
            return _DRAFT_LIST.validate_json(raw)
        except ValueError:
            logger.warning("drafts_load_failed", key=self._key, exc_info=True)
            return []
        except Exception:
            logger.error("drafts_storage_read_failed", key=self._key, exc_info=True)
            return []

    async def get_draft(self, draft_id: str) -> Draft | None:
        return next((d for d in await self.get_drafts() if d.id == draft_id), None)

    async def save_draft(self, draft: Draft) -> None:
        """Insert ``draft``, or replace the stored draft with the same id."""
        drafts = await self.get_drafts()
        for i, existing in enumerate(drafts):
            if existing.id == draft.id:
                drafts[i] = draft
                break
        else:
            drafts.append(draft)
        await self._write(drafts)

    async def create_draft(self, **fields: Any) -> Draft:
        now = utcnow()
        draft = Draft.model_validate({**fields, "id": new_id("draft"), "saved_at": now, "updated_at": now})
        await self.save_draft(draft)
        return draft

    async def update_draft(self, draft_id: str, **updates: Any) -> Draft | None:
        """Merge ``updates`` into a stored draft and bump ``updated_at``; None if it does not exist."""
        draft = await self.get_draft(draft_id)
        if draft is None:
            return None

        updates = {k: v for k, v in updates.items() if k not in ("id", "saved_at", "updated_at")}
        updated = Draft.model_validate({**draft.model_dump(), **updates, "updated_at": utcnow()})
        await self.save_draft(updated)
        return updated

    async def delete_draft(self, draft_id: str) -> None:
        drafts = await self.get_drafts()
        await self._write([d for d in drafts if d.id != draft_id])

    async def count(self) -> int:
        return len(await self.get_drafts())

    async def _write(self, drafts: list[Draft]) -> None:
        try:
            await self._storage.set(self._key, _DRAFT_LIST.dump_json(drafts).decode())
        except Exception:
            logger.error("drafts_save_failed", key=self._key, exc_info=True)
