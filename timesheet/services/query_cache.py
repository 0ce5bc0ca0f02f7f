"""In-process cache of read queries, invalidated by key prefix after writes.

Reads are keyed by tuples such as ``("time_entries", user_id, page, search,
sort, order, project_id)``. A mutation calls ``invalidate(("time_entries",))``
and the next read of any matching key goes back to the database.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Hashable, TypeVar

from .auth_events import AuthChange, AuthEvent, auth_events

logger = logging.getLogger("timesheet.cache")

T = TypeVar("T")
QueryKey = tuple[Hashable, ...]

TIME_ENTRIES = "time_entries"
PROJECTS = "projects"
TASKS = "tasks"


class QueryCache:
    def __init__(self, max_entries: int = 512) -> None:
        self._entries: OrderedDict[QueryKey, Any] = OrderedDict()
        self._lock = threading.Lock()
        self._generation = 0
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: QueryKey) -> bool:
        with self._lock:
            return key in self._entries

    def fetch(self, key: QueryKey, loader: Callable[[], T]) -> T:
        """Return the cached value for ``key`` or run ``loader`` and remember it.

        Loader errors propagate and nothing is stored. A result whose load
        overlapped an invalidation is returned but not cached.
        """
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self.hits += 1
                return self._entries[key]
            self.misses += 1
            generation = self._generation

        value = loader()

        with self._lock:
            if generation == self._generation:
                self._entries[key] = value
                self._entries.move_to_end(key)
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)
        return value

    def invalidate(self, *prefixes: QueryKey) -> int:
        """Drop every key that starts with any of ``prefixes``."""

        with self._lock:
            self._generation += 1
            stale = [
                key for key in self._entries
                if any(key[: len(prefix)] == prefix for prefix in prefixes)
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("cache.invalidated", extra={"extra_data": {"keys": len(stale)}})
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()
            self.hits = 0
            self.misses = 0


query_cache = QueryCache()


def invalidate_time_entries() -> None:
    query_cache.invalidate((TIME_ENTRIES,))


def invalidate_projects() -> None:
    # Entry rows show project names, so they go stale too.
    query_cache.invalidate((PROJECTS,), (TASKS,), (TIME_ENTRIES,))


def invalidate_tasks() -> None:
    query_cache.invalidate((TASKS,), (TIME_ENTRIES,))


def _drop_signed_out_user(change: AuthChange) -> None:
    if change.event is AuthEvent.SIGNED_OUT:
        query_cache.invalidate((TIME_ENTRIES, change.user_id))


auth_events.subscribe(_drop_signed_out_user)


__all__ = [
    "PROJECTS",
    "QueryCache",
    "QueryKey",
    "TASKS",
    "TIME_ENTRIES",
    "invalidate_projects",
    "invalidate_tasks",
    "invalidate_time_entries",
    "query_cache",
]
