"""
Lock management for ideaplan.

Two layers:
- KeyedLocks: in-process, one threading.Lock per idea id. Serialises
  answer submission and breakdown runs for the same idea while letting
  unrelated ideas proceed in parallel.
- file_lock: flock on a sidecar file, used by JsonFileStore so that two
  processes sharing a data directory never interleave writes, and held
  across a whole get -> mutate -> upsert by JsonFileStore.hold().
"""

import fcntl
import logging
import os
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ideaplan.errors import ConflictError

logger = logging.getLogger(__name__)


class LockTimeout(Exception):
    """Lock acquisition timed out."""
    pass


class KeyedLocks:
    """A registry of per-key locks.

    An entry lives only while some caller holds or waits on it, so the
    registry doesn't grow with every idea id ever seen.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: dict[str, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def is_locked(self, key: str) -> bool:
        """True while some caller holds the lock for key."""
        with self._guard:
            entry = self._locks.get(key)
        return entry is not None and entry[0].locked()

    @contextmanager
    def hold(self, key: str, timeout: float = 60):
        """
        Acquire the lock for key, yield, release on exit.

        Raises:
            LockTimeout: if the lock isn't acquired within timeout seconds
        """
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        try:
            if not lock.acquire(timeout=timeout):
                raise LockTimeout(f"Could not acquire lock for {key} within {timeout}s")
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


@contextmanager
def file_lock(lock_file: Path, timeout: float = 60):
    """
    Acquire an exclusive flock on lock_file, yield, release on exit.

    Lock files are never deleted: deleting them lets two processes hold
    "exclusive" locks on different inodes with the same path.
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    fd = open(lock_file, 'a')
    start = time.monotonic()

    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.monotonic() - start > timeout:
                fd.close()
                raise LockTimeout(f"Could not acquire {lock_file.name} within {timeout}s")
            time.sleep(0.05)

    try:
        logger.debug(f"Acquired {lock_file} (pid {os.getpid()})")
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        fd.close()


@contextmanager
def idea_lock(locks: KeyedLocks, idea_id: str, timeout: float = 60, store=None, kind: Optional[str] = None):
    """Hold the per-idea lock for a whole read-modify-write.

    With a store, its hold(kind, idea_id) is taken too, so other processes
    sharing the store's data are kept out as well. Any lock timeout inside
    surfaces as ConflictError.
    """
    try:
        with locks.hold(idea_id, timeout):
            if store is None:
                yield
            else:
                with store.hold(kind, idea_id, timeout):
                    yield
    except LockTimeout as e:
        raise ConflictError(f"{idea_id} is busy: {e}") from e
