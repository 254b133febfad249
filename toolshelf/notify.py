import logging
from collections import deque
from datetime import datetime
from typing import Deque, List, Optional

from pydantic import BaseModel, Field

from .models import utcnow

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    level: str  # info | error
    message: str
    entry_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Notifier:
    """User facing messages, drained by whatever displays them."""

    def __init__(self, maxlen: int = 50):
        self._items: Deque[Notification] = deque(maxlen=maxlen)

    def info(self, message: str, entry_id: Optional[str] = None) -> Notification:
        return self._push("info", message, entry_id)

    def error(self, message: str, entry_id: Optional[str] = None) -> Notification:
        return self._push("error", message, entry_id)

    def _push(self, level: str, message: str, entry_id: Optional[str]) -> Notification:
        note = Notification(level=level, message=message, entry_id=entry_id)
        self._items.append(note)
        logger.debug("notify %s: %s", level, message)
        return note

    def drain(self) -> List[Notification]:
        items = list(self._items)
        self._items.clear()
        return items
