"""
In-process serialization for match bookings.

The conflict check and the insert must happen as one step, otherwise two
requests for overlapping slots can both see a free court and both book it.
Every booking holds the locks for its court and both teams while it checks
and commits. Keys are always acquired in sorted order so two bookings that
share resources cannot deadlock.

These locks only cover a single process. A multi-worker deployment needs a
database-level lock (e.g. SELECT ... FOR UPDATE on the court row) instead.
"""
import threading
import weakref
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

_REGISTRY_LOCK = threading.Lock()

# Entries drop out once no booking holds or waits on the lock
_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(key: str) -> threading.Lock:
    with _REGISTRY_LOCK:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCKS[key] = lock
        return lock


def booking_keys(team_ids: Iterable[int], court_id: Optional[int] = None) -> List[str]:
    keys = {f"team:{tid}" for tid in team_ids}
    if court_id is not None:
        keys.add(f"court:{court_id}")
    return sorted(keys)


@contextmanager
def hold_booking_locks(keys: Iterable[str]) -> Iterator[None]:
    acquired: List[threading.Lock] = []
    try:
        for key in sorted(set(keys)):
            lock = _lock_for(key)
            lock.acquire()
            acquired.append(lock)
        yield
    finally:
        for lock in reversed(acquired):
            lock.release()
