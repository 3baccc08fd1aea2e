"""Per-key exclusive locks scoped to a transaction."""

import threading
from typing import Any, Dict, Iterable, Optional

from .exceptions.storefront_exception import LockTimeoutError


class LockManager:
    """
    Grants exclusive row locks keyed by entity id.

    A lock is owned by exactly one transaction at a time and is held until the
    owning transaction releases it. Locks on different keys are independent,
    so transactions working on different rows never wait on each other.

    A key's lock entry lives only while some transaction holds or waits on it.
    """

    def __init__(self):
        self.row_locks: Dict[Any, threading.Lock] = {}
        # Holders plus waiters per key
        self.refcounts: Dict[Any, int] = {}
        self.owners: Dict[Any, str] = {}
        self.lock = threading.RLock()

    def _checkout(self, key: Any) -> threading.Lock:
        with self.lock:
            row_lock = self.row_locks.get(key)
            if row_lock is None:
                row_lock = threading.Lock()
                self.row_locks[key] = row_lock
            self.refcounts[key] = self.refcounts.get(key, 0) + 1
            return row_lock

    def _checkin(self, key: Any) -> None:
        # Caller holds self.lock
        self.refcounts[key] -= 1
        if self.refcounts[key] == 0:
            del self.refcounts[key]
            del self.row_locks[key]

    def acquire(self, txn_id: str, key: Any, timeout: Optional[float] = None) -> bool:
        """
        Acquire the exclusive lock on ``key`` for ``txn_id``.

        Args:
            txn_id: Owning transaction ID
            key: Entity key to lock
            timeout: Seconds to wait; None waits forever

        Returns:
            bool: True if newly acquired, False if the transaction already held it

        Raises:
            LockTimeoutError: If the lock was not granted within ``timeout``
        """
        with self.lock:
            if self.owners.get(key) == txn_id:
                return False
            row_lock = self._checkout(key)

        acquired = row_lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            with self.lock:
                self._checkin(key)
            print(f"Lock wait timeout: transaction {txn_id} on key {key}")
            raise LockTimeoutError(txn_id, key, timeout)

        with self.lock:
            self.owners[key] = txn_id
        return True

    def release(self, txn_id: str, key: Any) -> bool:
        """Release ``key`` if owned by ``txn_id``."""
        with self.lock:
            if self.owners.get(key) != txn_id:
                return False

            del self.owners[key]
            self.row_locks[key].release()
            self._checkin(key)
            return True

    def release_all(self, txn_id: str, keys: Iterable[Any]) -> int:
        """Release every lock in ``keys`` owned by ``txn_id``; returns how many."""
        released = 0
        for key in list(keys):
            if self.release(txn_id, key):
                released += 1
        return released

    def owner(self, key: Any) -> Optional[str]:
        return self.owners.get(key)

    def is_locked(self, key: Any) -> bool:
        return key in self.owners

    def held_count(self) -> int:
        return len(self.owners)

    def tracked_count(self) -> int:
        """Number of keys with a live lock entry (held or waited on)."""
        with self.lock:
            return len(self.row_locks)
