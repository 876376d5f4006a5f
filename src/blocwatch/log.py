"""Bounded event log: per-subject ring buffer of records.

Stores at most ``capacity`` records.  Appending to a full log evicts the
single oldest record first (strict FIFO, the remainder keeps its order).

Thread Safety:
    All methods are protected by a ``threading.Lock``.  Every read returns
    a snapshot copy, so later appends never show through.

"""

import threading
from collections import deque
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from blocwatch._errors import ConfigError


T = TypeVar("T")


class BoundedEventLog(Generic[T]):
    """Fixed-capacity record store with oldest-eviction.

    Records are stored in a ring buffer (deque with maxlen).  Capacity is
    fixed at construction and never changes.

    Args:
        capacity: Maximum number of records to retain.

    """

    __slots__ = ("_capacity", "_evicted", "_lock", "_records")

    def __init__(self, capacity: int = 100) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            msg = f"capacity must be a positive integer, got {capacity!r}"
            raise ConfigError(msg)
        self._capacity = capacity
        self._records: deque[T] = deque(maxlen=capacity)
        self._evicted = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Maximum number of retained records."""
        return self._capacity

    @property
    def evicted(self) -> int:
        """Number of records dropped by capacity eviction so far."""
        with self._lock:
            return self._evicted

    def append(self, record: T) -> None:
        """Add a record at the end, evicting the oldest one if full."""
        with self._lock:
            if len(self._records) >= self._capacity:
                self._evicted += 1
            self._records.append(record)

    def all(self) -> list[T]:
        """Return every record, oldest to newest."""
        with self._lock:
            return list(self._records)

    def recent(self, n: int = 20) -> list[T]:
        """Return the N most recent records, oldest to newest."""
        if n <= 0:
            return []
        with self._lock:
            items = list(self._records)
        return items[-n:]

    def query(
        self,
        predicate: Callable[[T], bool] | None = None,
        *,
        limit: int = 100,
    ) -> list[T]:
        """Return records matching ``predicate``, most recent first.

        Args:
            predicate: Filter applied to each record (all records if None).
            limit: Maximum number of records to return.

        """
        with self._lock:
            items = list(self._records)

        results: list[T] = []
        for record in reversed(items):
            if len(results) >= limit:
                break
            if predicate is not None and not predicate(record):
                continue
            results.append(record)
        return results

    def clear(self) -> int:
        """Remove all records and return the count that was cleared."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def stats(self) -> dict[str, Any]:
        """Return summary statistics about stored records."""
        with self._lock:
            return {
                "total": len(self._records),
                "capacity": self._capacity,
                "evicted": self._evicted,
            }
