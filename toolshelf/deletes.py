"""
Soft delete with undo.

A delete takes the entry out of the catalog immediately and starts a
countdown. Until it elapses the user may undo. Only one delete is ever
pending: requesting another one cancels the running countdown and issues
the remote delete for the previous entry right away.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .catalog import Catalog
from .errors import StoreError
from .models import Entry
from .notify import Notifier
from .store import DocumentStore

logger = logging.getLogger(__name__)

UNDO_SECONDS = 5.0


@dataclass
class PendingDelete:
    entry: Entry
    task: asyncio.Task


class PendingDeletes:
    def __init__(
        self,
        catalog: Catalog,
        store: DocumentStore,
        notifier: Notifier,
        undo_seconds: float = UNDO_SECONDS,
    ):
        self.catalog = catalog
        self.store = store
        self.notifier = notifier
        self.undo_seconds = undo_seconds
        self._pending: Optional[PendingDelete] = None

    @property
    def pending(self) -> Optional[PendingDelete]:
        return self._pending

    async def request(self, entry_id: str) -> Entry:
        entry = self.catalog.remove(entry_id)

        previous = self._pending
        if previous is not None:
            previous.task.cancel()

        task = asyncio.get_running_loop().create_task(self._countdown(entry))
        self._pending = PendingDelete(entry, task)
        self.notifier.info("Tool deleted", entry_id=entry.id)

        if previous is not None:
            await self._finalize(previous.entry)
        return entry

    async def _countdown(self, entry: Entry):
        await asyncio.sleep(self.undo_seconds)
        if self._pending is None or self._pending.entry.id != entry.id:
            return
        self._pending = None
        await self._finalize(entry)

    async def _finalize(self, entry: Entry) -> bool:
        try:
            doc_id = await self.catalog.confirmed_id(entry.id)
            if doc_id is None:
                logger.info("Tool %s was never stored, nothing to delete", entry.id)
                return True
            try:
                await self.store.delete(doc_id)
            except StoreError:
                logger.exception("Error deleting tool %s", doc_id)
                self.notifier.error("Failed to delete tool", entry_id=doc_id)
                return False
            logger.debug("Tool %s deleted", doc_id)
            return True
        finally:
            self.catalog.release(entry.id)

    def undo(self, entry_id: Optional[str] = None) -> Optional[Entry]:
        pending = self._pending
        if pending is None:
            return None
        if entry_id is not None and entry_id != pending.entry.id:
            return None
        pending.task.cancel()
        self._pending = None
        return self.catalog.restore(pending.entry)

    async def flush(self):
        pending = self._pending
        if pending is None:
            return
        self._pending = None
        pending.task.cancel()
        await self._finalize(pending.entry)
