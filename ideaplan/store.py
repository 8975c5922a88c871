"""
Session stores for ideaplan.

A store holds JSON-compatible dicts addressed by (kind, key): the kind
names the record type (clarification_sessions, breakdown_sessions) and the
key is the idea id, so one store can back both the clarifier and the
breakdown engine. Semantics are last-write-wins with read-your-writes.
Two implementations:

- MemoryStore: dict-backed, for tests and one-shot runs.
- JsonFileStore: one <root>/<kind>/<key>.json file per record. Writes go
  to a temp file that is renamed into place, so a reader sees either the
  previous record or the new one, never a partial write. hold() takes a
  per-record file lock so a read-modify-write in one process can't
  interleave with one in another.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import ContextManager, Optional, Protocol

from ideaplan.lib.constants import IDEA_ID_PATTERN
from ideaplan.lib.locking import file_lock

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Interface the agents and engine persist through."""

    def get(self, kind: str, key: str) -> Optional[dict]: ...

    def upsert(self, kind: str, key: str, data: dict) -> None: ...

    def delete(self, kind: str, key: str) -> bool: ...

    def keys(self, kind: str) -> list[str]: ...

    def hold(self, kind: str, key: str, timeout: float = 60) -> ContextManager: ...


class MemoryStore:
    """In-process store. Values are deep-copied on the way in and out."""

    def __init__(self):
        self._data: dict[tuple[str, str], dict] = {}
        self._lock = threading.Lock()

    def get(self, kind: str, key: str) -> Optional[dict]:
        with self._lock:
            value = self._data.get((kind, key))
            return copy.deepcopy(value) if value is not None else None

    def upsert(self, kind: str, key: str, data: dict) -> None:
        snapshot = copy.deepcopy(data)
        with self._lock:
            self._data[(kind, key)] = snapshot

    def delete(self, kind: str, key: str) -> bool:
        with self._lock:
            return self._data.pop((kind, key), None) is not None

    def keys(self, kind: str) -> list[str]:
        with self._lock:
            return sorted(key for k, key in self._data if k == kind)

    def hold(self, kind: str, key: str, timeout: float = 60):
        # Nothing outside this process can see the data
        return nullcontext()


class JsonFileStore:
    """File-backed store rooted at <root>/."""

    def __init__(self, root: Path, lock_timeout: float = 60):
        self.root = Path(root)
        self.lock_timeout = lock_timeout

    def _dir(self, kind: str) -> Path:
        if not IDEA_ID_PATTERN.match(kind):
            raise ValueError(f"Invalid store kind: {kind!r}")
        return self.root / kind

    def _path(self, kind: str, key: str) -> Path:
        # Keys become file names
        if not IDEA_ID_PATTERN.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self._dir(kind) / f"{key}.json"

    def _lock_path(self, kind: str, key: str, purpose: str) -> Path:
        # Separate files: flock on a second descriptor of the same file
        # would block against our own hold()
        return self._dir(kind) / ".locks" / f"{key}.{purpose}.lock"

    @contextmanager
    def hold(self, kind: str, key: str, timeout: Optional[float] = None):
        """Exclusive hold on one record across processes.

        Raises:
            LockTimeout: another holder kept it longer than timeout
        """
        self._path(kind, key)
        with file_lock(self._lock_path(kind, key, "hold"), timeout or self.lock_timeout):
            yield

    def get(self, kind: str, key: str) -> Optional[dict]:
        path = self._path(kind, key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to load {path}: {e}")
            return None

    def upsert(self, kind: str, key: str, data: dict) -> None:
        path = self._path(kind, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(data, indent=2)

        with file_lock(self._lock_path(kind, key, "write"), self.lock_timeout):
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def delete(self, kind: str, key: str) -> bool:
        path = self._path(kind, key)
        with file_lock(self._lock_path(kind, key, "write"), self.lock_timeout):
            if not path.exists():
                return False
            path.unlink()
            return True

    def keys(self, kind: str) -> list[str]:
        directory = self._dir(kind)
        if not directory.exists():
            return []
        return sorted(p.stem for p in directory.glob("*.json"))
