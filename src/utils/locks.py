import threading
from contextlib import contextmanager
from typing import Iterator

from src.exceptions import AccountUnavailable


class UserLocks:
    """One lock per user id, so a user's read-modify-write cycles never interleave in this process."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        lock = self._lock_for(user_id)
        if not lock.acquire(timeout=self.timeout):
            raise AccountUnavailable(f"Timed out after {self.timeout}s waiting for the ledger of {user_id}")
        try:
            yield
        finally:
            lock.release()
