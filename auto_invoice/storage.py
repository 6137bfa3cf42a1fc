# auto_invoice/storage.py
"""Durable counter store and invoice archive.

Both come in a filesystem flavour used by the scheduled run and an
in-memory flavour for previews and tests.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ConcurrentRunError, CounterLockedError, CounterStoreError
from .models import DeliveryOutcome


def artifact_path(outcome: DeliveryOutcome | str, artifact_name: str, invoice_number: int) -> str:
    status = outcome.value if isinstance(outcome, DeliveryOutcome) else str(outcome)
    return f"{status}/{artifact_name}-{invoice_number}.pdf"


# ---------------------------------------------------------
# COUNTER STORES
# ---------------------------------------------------------
class MemoryCounterStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> None:
        found = self._data.get(key)
        if found != expected:
            raise ConcurrentRunError(expected, found)
        self._data[key] = value


class FileCounterStore:
    """One file per key under ``directory``.

    Writes go through a temp file and ``os.replace`` so a crash never leaves a
    half-written value behind. ``compare_and_set`` holds an exclusive
    ``<key>.lock`` file for the duration of the check and write.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / key

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CounterStoreError(f"cannot read {key}: {e}") from e

    def put(self, key: str, value: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(value)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, self._path(key))
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CounterStoreError(f"cannot write {key}: {e}") from e

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> None:
        lock_path = self.directory / f"{key}.lock"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            lock_fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise CounterLockedError(str(lock_path))
        except OSError as e:
            raise CounterStoreError(f"cannot lock {key}: {e}") from e

        try:
            os.write(lock_fd, str(os.getpid()).encode("ascii"))
            found = self.get(key)
            if found != expected:
                raise ConcurrentRunError(expected, found)
            self.put(key, value)
        finally:
            os.close(lock_fd)
            lock_path.unlink(missing_ok=True)


# ---------------------------------------------------------
# ARTIFACT STORES
# ---------------------------------------------------------
class MemoryArtifactStore:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def put(self, path: str, content: bytes) -> None:
        self.objects[path] = bytes(content)

    def get(self, path: str) -> bytes:
        return self.objects[path]

    def list(self, prefix: str = "") -> List[str]:
        return sorted(p for p in self.objects if p.startswith(prefix))


class DirectoryArtifactStore:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def put(self, path: str, content: bytes) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    def get(self, path: str) -> bytes:
        return (self.root / path).read_bytes()

    def list(self, prefix: str = "") -> List[str]:
        if not self.root.exists():
            return []
        paths = (p.relative_to(self.root).as_posix() for p in self.root.rglob("*.pdf"))
        return sorted(p for p in paths if p.startswith(prefix))
