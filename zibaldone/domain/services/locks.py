"""Per-book mutual exclusion for mutating operations."""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator
from uuid import UUID

logger = logging.getLogger(__name__)


class BookLocks:
    """In-process registry of re-entrant locks keyed by book id.

    Mutating operations on the same book run one at a time; operations
    on different books do not block each other.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def _lock_for(self, book_id: UUID) -> threading.RLock:
        with self._guard:
            return self._locks.setdefault(str(book_id), threading.RLock())

    @contextmanager
    def hold(self, book_id: UUID) -> Iterator[None]:
        """Hold the book's lock for the duration of the block."""
        lock = self._lock_for(book_id)
        with lock:
            yield

    def discard(self, book_id: UUID) -> None:
        """Forget the lock of a deleted book."""
        with self._guard:
            self._locks.pop(str(book_id), None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
