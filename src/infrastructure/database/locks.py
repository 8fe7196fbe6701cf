"""Per-entity locks for read-modify-write sequences that the store cannot do atomically."""
from __future__ import annotations

import threading
import weakref

_GUARD = threading.Lock()
# entries disappear once no caller holds or waits on the lock
_LOCKS: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()


def entity_lock(key: str) -> threading.Lock:
    """Return the lock for ``key``, creating it on first use."""
    with _GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock
