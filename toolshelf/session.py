import logging
from dataclasses import dataclass, field

from .catalog import Catalog
from .config import Settings
from .deletes import PendingDeletes
from .mirror import LocalMirror
from .notify import Notifier
from .store import DocumentStore, JsonFileStore, MemoryStore, RestStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    if settings.store == "memory":
        return MemoryStore()
    if settings.store == "rest":
        if not settings.store_url:
            raise ValueError("TOOLSHELF_STORE_URL is required for the rest store")
        return RestStore(
            settings.store_url,
            collection=settings.collection,
            timeout=settings.request_timeout,
        )
    return JsonFileStore(settings.store_path, collection=settings.collection)


@dataclass
class Session:
    """Everything one running application owns."""

    settings: Settings
    store: DocumentStore
    notifier: Notifier = field(default_factory=Notifier)
    catalog: Catalog = field(init=False)
    deletes: PendingDeletes = field(init=False)

    def __post_init__(self):
        mirror = LocalMirror(self.settings.mirror_path) if self.settings.mirror_path else None
        self.catalog = Catalog(self.store, self.notifier, mirror=mirror)
        self.deletes = PendingDeletes(
            self.catalog,
            self.store,
            self.notifier,
            undo_seconds=self.settings.undo_seconds,
        )

    async def start(self):
        await self.catalog.load()

    async def close(self):
        await self.deletes.flush()
