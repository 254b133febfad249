from enum import Enum
from typing import Iterable, List, Optional

from .models import Entry


class SortKey(str, Enum):
    DATE_ADDED = "dateAdded"
    ALPHABETICAL = "alphabetical"
    RECENTLY_USED = "recentlyUsed"


def categories(entries: Iterable[Entry]) -> List[str]:
    """Distinct categories across the whole (unfiltered) catalog."""
    seen: List[str] = []
    for e in entries:
        if e.category not in seen:
            seen.append(e.category)
    return seen


def project(
    entries: Iterable[Entry],
    category: Optional[str] = None,
    sort: SortKey = SortKey.DATE_ADDED,
) -> List[Entry]:
    items = list(entries)
    if category:
        items = [e for e in items if e.category == category]

    if sort == SortKey.DATE_ADDED:
        items.sort(key=lambda e: e.date_added, reverse=True)
    elif sort == SortKey.ALPHABETICAL:
        items.sort(key=lambda e: e.name.casefold())
    elif sort == SortKey.RECENTLY_USED:
        items.sort(key=lambda e: e.last_used, reverse=True)
    return items
