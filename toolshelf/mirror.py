import json
import logging
from pathlib import Path
from typing import Iterable, List

from .models import Entry

logger = logging.getLogger(__name__)

MIRROR_KEY = "tools"


class LocalMirror:
    """
    Best-effort copy of the catalog under a fixed key in a small JSON
    key-value file. The remote store stays authoritative; this is only a
    convenience cache, so failures are logged and swallowed.
    """

    def __init__(self, path: Path, key: str = MIRROR_KEY):
        self.path = Path(path)
        self.key = key

    def save(self, entries: Iterable[Entry]) -> bool:
        try:
            data = self._read_slots()
            data[self.key] = [e.public() for e in entries]
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except (OSError, ValueError):
            logger.warning("Could not refresh local mirror %s", self.path, exc_info=True)
            return False
        return True

    def load(self) -> List[Entry]:
        try:
            raw = self._read_slots().get(self.key) or []
            return [Entry.model_validate(item) for item in raw]
        except (OSError, ValueError):
            logger.warning("Could not read local mirror %s", self.path, exc_info=True)
            return []

    def _read_slots(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
