import asyncio

from conftest import RecordingStore, make_entry

from toolshelf.catalog import Catalog
from toolshelf.deletes import PendingDeletes
from toolshelf.models import EntryDraft
from toolshelf.view import categories


async def _setup(docs, notifier, undo_seconds=60.0, **store_kw):
    store = RecordingStore(docs, **store_kw)
    catalog = Catalog(store, notifier)
    await catalog.load()
    deletes = PendingDeletes(catalog, store, notifier, undo_seconds=undo_seconds)
    return store, catalog, deletes


def test_delete_removes_locally_and_waits(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("a")
        assert "a" not in catalog
        assert deletes.pending.entry.id == "a"
        assert store.deleted == []

    asyncio.run(scenario())


def test_second_delete_finalizes_first(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("a")
        await deletes.request("b")

        assert store.deleted == ["a"]
        assert "a" not in store.documents
        assert "b" in store.documents
        assert deletes.pending.entry.id == "b"
        assert catalog.entries == []

    asyncio.run(scenario())


def test_undo_restores_without_remote_delete(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier, undo_seconds=0.05)
        await deletes.request("a")
        restored = deletes.undo()
        await asyncio.sleep(0.1)

        assert restored.id == "a"
        assert "a" in catalog
        assert deletes.pending is None
        assert store.deleted == []

    asyncio.run(scenario())


def test_undo_for_other_entry_is_noop(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("a")
        assert deletes.undo("b") is None
        assert deletes.pending.entry.id == "a"

    asyncio.run(scenario())


def test_countdown_elapse_deletes_remotely(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier, undo_seconds=0.01)
        await deletes.request("a")
        await asyncio.sleep(0.1)

        assert store.deleted == ["a"]
        assert deletes.pending is None
        assert deletes.undo("a") is None
        assert "a" not in catalog

    asyncio.run(scenario())


def test_undo_after_supersession_is_noop(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("a")
        await deletes.request("b")
        assert deletes.undo("a") is None
        assert "a" not in catalog

    asyncio.run(scenario())


def test_delete_failure_keeps_local_removal(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(
            seeded_docs, notifier, undo_seconds=0.01, fail_delete=True
        )
        await deletes.request("a")
        await asyncio.sleep(0.1)
        assert store.deleted == ["a"]
        assert "a" not in catalog
        assert "a" in store.documents

    asyncio.run(scenario())
    messages = [n.message for n in notifier.drain()]
    assert messages == ["Tool deleted", "Failed to delete tool"]


def test_delete_of_unsaved_add_uses_store_id(notifier):
    async def scenario():
        store, catalog, deletes = await _setup({}, notifier)
        pending = catalog.add(EntryDraft(name="New", url="new.example", category="Testing"))
        await deletes.request(pending.entry.id)
        await deletes.flush()

        assert len(store.deleted) == 1
        assert store.documents == {}
        assert catalog.entries == []

    asyncio.run(scenario())


def test_flush_finalizes_pending(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("b")
        await deletes.flush()
        assert store.deleted == ["b"]
        assert deletes.pending is None
        await deletes.flush()
        assert store.deleted == ["b"]

    asyncio.run(scenario())


def test_reload_does_not_bring_back_pending_delete(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier, undo_seconds=0.05)
        await deletes.request("a")
        await catalog.load()
        assert "a" not in catalog
        assert categories(catalog.entries) == ["DevOps"]

        await asyncio.sleep(0.2)
        assert store.deleted == ["a"]
        assert "a" not in catalog
        await catalog.load()
        assert [e.id for e in catalog.entries] == ["b"]

    asyncio.run(scenario())


def test_undo_after_reload_restores_once(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier)
        await deletes.request("a")
        await catalog.load()
        deletes.undo("a")
        assert sorted(e.id for e in catalog.entries) == ["a", "b"]
        assert store.deleted == []

    asyncio.run(scenario())


def test_reload_skips_confirmed_id_of_pending_add(notifier):
    async def scenario():
        store, catalog, deletes = await _setup({}, notifier)
        pending = catalog.add(EntryDraft(name="New", url="new.example", category="Testing"))
        await deletes.request(pending.entry.id)
        await pending.task
        await catalog.load()
        assert catalog.entries == []
        await deletes.flush()
        assert store.documents == {}

    asyncio.run(scenario())


def test_failed_delete_shows_again_after_reload(notifier, seeded_docs):
    async def scenario():
        store, catalog, deletes = await _setup(seeded_docs, notifier, fail_delete=True)
        await deletes.request("a")
        await deletes.flush()
        assert "a" not in catalog
        await catalog.load()
        assert "a" in catalog

    asyncio.run(scenario())


def test_store_id_with_temporary_look_is_deleted(notifier):
    docs = {"tmp-42": make_entry("tmp-42", name="Odd").record()}

    async def scenario():
        store, catalog, deletes = await _setup(docs, notifier)
        await deletes.request("tmp-42")
        await deletes.flush()
        assert store.deleted == ["tmp-42"]
        assert store.documents == {}

    asyncio.run(scenario())
