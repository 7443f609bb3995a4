"""
Bounded, most-recent-first list of tracking queries
"""
from typing import List

from config import RECENT_SEARCHES_CAPACITY


class RecentSearches:
    """Recent tracking queries, newest first, without duplicates"""

    def __init__(self, capacity: int = RECENT_SEARCHES_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: List[str] = []

    def add(self, query: str) -> None:
        """
        Record a query.

        Blank queries are ignored. A query already in the list (compared
        case-insensitively) moves to the front with its newest spelling.
        """
        cleaned = (query or "").strip()
        if not cleaned:
            return

        key = cleaned.lower()
        self._items = [item for item in self._items if item.lower() != key]
        self._items.insert(0, cleaned)
        del self._items[self.capacity:]

    def items(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, query: object) -> bool:
        if not isinstance(query, str):
            return False
        return query.strip().lower() in (item.lower() for item in self._items)
