"""JSON documents on disk with atomic writes, archive copies and per-file locks.

Each logical document (tiles, settings) lives in one file. Writers go through
``JsonDocument.locked()`` so a read-modify-write cycle is never interleaved with
another one in the same process. Nothing is retried: a failed write raises
``PersistenceError`` and the previous file stays as it was.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator

from infohub.errors import PersistenceError

logger = logging.getLogger(__name__)

_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def path_lock(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[key] = lock
        return lock


def _archive_stamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def write_text_atomic(path: Path, text: str) -> int:
    """Write via a temp file in the same directory and rename over the target."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    except OSError as exc:
        raise PersistenceError(f"Could not prepare {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except OSError as exc:
        raise PersistenceError(f"Could not write {path}: {exc}") from exc
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
    return len(text.encode("utf-8"))


def archive_copy(path: Path, archive_dir: Path, prefix: str, suffix: str) -> Path | None:
    """Copy ``path`` to ``archive_dir/<prefix>_<timestamp><suffix>``; None if there is nothing to copy."""
    if not path.exists():
        return None

    stamp = _archive_stamp()
    target = archive_dir / f"{prefix}_{stamp}{suffix}"
    counter = 1
    while target.exists():
        target = archive_dir / f"{prefix}_{stamp}_{counter}{suffix}"
        counter += 1

    try:
        archive_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
    except OSError as exc:
        raise PersistenceError(f"Could not back up {path}: {exc}") from exc

    logger.info("Backup created: %s -> %s", path, target)
    return target


class JsonDocument:
    def __init__(self, path: Path, archive_dir: Path, default: Callable[[], Any]):
        self.path = path
        self.archive_dir = archive_dir
        self._default = default
        self._lock = path_lock(path)

    @property
    def name(self) -> str:
        return self.path.stem

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Any:
        if not self.path.exists():
            logger.debug("%s not found, using default", self.path)
            return self._default()

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("JSON decode error in %s: %s", self.path, exc)
            raise PersistenceError(f"{self.path.name} is not valid JSON") from exc

    def write(self, value: Any) -> None:
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not encode {self.path.name}: {exc}") from exc

        with self._lock:
            written = write_text_atomic(self.path, text)
        logger.debug("Wrote %s (%d bytes)", self.path, written)

    def update(self, mutate: Callable[[Any], Any]) -> Any:
        """Read, apply ``mutate`` and write the result back as one unit."""
        with self._lock:
            current = self.read()
            updated = mutate(current)
            self.write(updated)
            return updated

    def backup(self) -> Path | None:
        with self._lock:
            return archive_copy(self.path, self.archive_dir, self.name, self.path.suffix)
