"""
Local catalog state.

The catalog is the single source of truth for what the user sees. Every
mutation is applied synchronously; persistence to the document store runs
in a background task and is reconciled by id when it settles:

- a confirmed create swaps the temporary id for the store id in place
- a failed create removes the optimistic entry again

Entries taken out for a pending delete are held: a reload skips them, and
the outcome of their create is kept until the delete is finalized or undone.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, NamedTuple, Optional, Set

from pydantic import ValidationError

from .errors import EntryNotFound, EntryValidationError, StoreError
from .mirror import LocalMirror
from .models import (
    CUSTOM_CATEGORY,
    DESCRIPTION_MAX,
    Entry,
    EntryChanges,
    EntryDraft,
    utcnow,
)
from .notify import Notifier
from .store import DocumentStore
from .urls import favicon_url, normalize_url

logger = logging.getLogger(__name__)

TEMP_PREFIX = "tmp-"


def new_temp_id() -> str:
    return TEMP_PREFIX + uuid.uuid4().hex


class PendingAdd(NamedTuple):
    entry: Entry
    task: "asyncio.Task[Optional[Entry]]"


def _resolve_category(category: Optional[str], custom: str) -> str:
    value = custom if category == CUSTOM_CATEGORY else category
    value = (value or "").strip()
    if not value:
        raise EntryValidationError("Category required")
    return value


def _validate_fields(
    name: Optional[str] = None,
    url: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    custom_category: str = "",
) -> dict:
    """Check the given fields; returns only the ones that were supplied."""
    fields: dict = {}
    if name is not None:
        name = name.strip()
        if not name:
            raise EntryValidationError("Name required")
        fields["name"] = name
    if url is not None:
        norm = normalize_url(url)
        if not norm:
            raise EntryValidationError("Please enter a valid URL")
        fields["url"] = norm
        fields["favicon"] = favicon_url(norm)
    if description is not None:
        if len(description) > DESCRIPTION_MAX:
            raise EntryValidationError(
                f"Description must be at most {DESCRIPTION_MAX} characters"
            )
        fields["description"] = description
    if category is not None:
        fields["category"] = _resolve_category(category, custom_category)
    return fields


class Catalog:
    def __init__(
        self,
        store: DocumentStore,
        notifier: Notifier,
        mirror: Optional[LocalMirror] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.mirror = mirror
        self._entries: List[Entry] = []
        self._inflight: Dict[str, asyncio.Task] = {}
        # ids taken out by remove() that a reload must not bring back
        self._held: Set[str] = set()
        # held temporary id -> store id, or None when the create failed
        self._settled: Dict[str, Optional[str]] = {}

    @property
    def entries(self) -> List[Entry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: str) -> bool:
        return self._index(entry_id) is not None

    def _index(self, entry_id: str) -> Optional[int]:
        return next(
            (i for i, e in enumerate(self._entries) if e.id == entry_id), None
        )

    def get(self, entry_id: str) -> Entry:
        idx = self._index(entry_id)
        if idx is None:
            raise EntryNotFound(entry_id)
        return self._entries[idx]

    def _held_ids(self) -> Set[str]:
        ids = set(self._held)
        ids.update(doc_id for doc_id in self._settled.values() if doc_id)
        return ids

    async def load(self) -> bool:
        try:
            docs = await self.store.list_all()
        except StoreError:
            logger.exception("Error fetching tools")
            self.notifier.error("Failed to load tools")
            return False

        entries: List[Entry] = []
        seen: Set[str] = self._held_ids()
        for doc_id, record in docs:
            if doc_id in seen:
                continue
            try:
                entries.append(Entry.model_validate({**record, "id": doc_id}))
            except ValidationError:
                logger.warning("Skipping malformed tool record %s", doc_id)
                continue
            seen.add(doc_id)
        # creates still in flight are not in the store listing yet
        entries.extend(e for e in self._entries if e.id in self._inflight)
        self._entries = entries
        logger.info("Loaded %d tools", len(entries))
        return True

    def add(self, draft: EntryDraft) -> PendingAdd:
        fields = _validate_fields(
            name=draft.name,
            url=draft.url,
            description=draft.description,
            category=draft.category,
            custom_category=draft.custom_category,
        )
        now = utcnow()
        entry = Entry(id=new_temp_id(), date_added=now, last_used=now, **fields)
        self._entries.append(entry)

        task = asyncio.get_running_loop().create_task(self._persist(entry))
        self._inflight[entry.id] = task
        return PendingAdd(entry, task)

    async def _persist(self, entry: Entry) -> Optional[Entry]:
        temp_id = entry.id
        try:
            doc_id = await self.store.create(entry.record())
        except StoreError:
            logger.exception("Error adding tool %s", entry.name)
            if temp_id in self:
                self._drop(temp_id)
            else:
                self._settled[temp_id] = None
            self.notifier.error("Failed to save tool", entry_id=temp_id)
            return None
        finally:
            self._inflight.pop(temp_id, None)

        return self._reconcile(temp_id, doc_id)

    def _reconcile(self, temp_id: str, doc_id: str) -> Optional[Entry]:
        idx = self._index(temp_id)
        if idx is None:
            logger.debug("Tool %s left the catalog before confirmation", temp_id)
            self._settled[temp_id] = doc_id
            self._drop(doc_id)
            return None
        confirmed = self._entries[idx].model_copy(update={"id": doc_id})
        self._entries[idx] = confirmed
        # a reload may already have listed the new document
        self._entries = [
            e for i, e in enumerate(self._entries) if i == idx or e.id != doc_id
        ]
        logger.debug("Tool %s confirmed as %s", temp_id, doc_id)
        return confirmed

    def _drop(self, entry_id: str):
        self._entries = [e for e in self._entries if e.id != entry_id]

    def edit(self, entry_id: str, changes: EntryChanges) -> Entry:
        idx = self._index(entry_id)
        if idx is None:
            raise EntryNotFound(entry_id)
        fields = _validate_fields(
            name=changes.name,
            url=changes.url,
            description=changes.description,
            category=changes.category,
            custom_category=changes.custom_category,
        )
        edited = self._entries[idx].model_copy(update=fields)
        self._entries[idx] = edited
        self._mirror()
        return edited

    def mark_used(self, entry_id: str) -> Entry:
        idx = self._index(entry_id)
        if idx is None:
            raise EntryNotFound(entry_id)
        used = self._entries[idx].model_copy(update={"last_used": utcnow()})
        self._entries[idx] = used
        self._mirror()
        return used

    def _mirror(self):
        if self.mirror is not None:
            self.mirror.save(self._entries)

    def remove(self, entry_id: str) -> Entry:
        """Take an entry out of view; it stays held until restored or released."""
        idx = self._index(entry_id)
        if idx is None:
            raise EntryNotFound(entry_id)
        self._held.add(entry_id)
        return self._entries.pop(idx)

    def release(self, entry_id: str):
        self._held.discard(entry_id)
        self._settled.pop(entry_id, None)

    def restore(self, entry: Entry) -> Optional[Entry]:
        """Re-append an entry taken out by ``remove``."""
        settled = entry.id in self._settled
        doc_id = self._settled.get(entry.id)
        self.release(entry.id)
        if settled:
            if doc_id is None:
                return None
            entry = entry.model_copy(update={"id": doc_id})
        if entry.id in self:
            return None
        self._entries.append(entry)
        return entry

    async def confirmed_id(self, entry_id: str) -> Optional[str]:
        """Store id for a held entry, waiting for its create to settle if needed."""
        task = self._inflight.get(entry_id)
        if task is not None:
            await asyncio.shield(task)
        return self._settled.get(entry_id, entry_id)
