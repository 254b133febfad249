from datetime import datetime, timedelta, timezone

import pytest

from toolshelf.errors import StoreError
from toolshelf.models import Entry
from toolshelf.notify import Notifier
from toolshelf.store import MemoryStore

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_entry(entry_id, name="Tool", category="Testing", added=0, used=0, **kw):
    return Entry(
        id=entry_id,
        name=name,
        url=kw.pop("url", f"https://{name.lower()}.example"),
        category=category,
        date_added=BASE_TIME + timedelta(minutes=added),
        last_used=BASE_TIME + timedelta(minutes=used),
        **kw,
    )


class RecordingStore(MemoryStore):
    """MemoryStore that remembers every delete call and can be told to fail."""

    def __init__(self, documents=None, fail_create=False, fail_delete=False, fail_list=False):
        super().__init__(documents)
        self.fail_create = fail_create
        self.fail_delete = fail_delete
        self.fail_list = fail_list
        self.deleted = []

    async def list_all(self):
        if self.fail_list:
            raise StoreError("offline")
        return await super().list_all()

    async def create(self, record):
        if self.fail_create:
            raise StoreError("permission denied")
        return await super().create(record)

    async def delete(self, doc_id):
        self.deleted.append(doc_id)
        if self.fail_delete:
            raise StoreError("permission denied")
        await super().delete(doc_id)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def seeded_docs():
    return {
        "a": make_entry("a", name="Alpha", category="Testing", added=1).record(),
        "b": make_entry("b", name="Beta", category="DevOps", added=2).record(),
    }
