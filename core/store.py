"""Persistence for the single published dataset document.

The document is keyed by one fixed identifier and holds the serialized Dataset
plus the time it was written. Each backend implements raw read/write/delete; the
base class owns the credential check so no backend can mutate before it passes.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from core.config import Settings
from core.errors import ReadError
from core.security import require_credential


logger = logging.getLogger(__name__)

DOCUMENT_ID = "letterease_data"


@dataclass(frozen=True)
class StoredDocument:
    data: Dict[str, Any]
    updated_at: datetime

    def to_json(self) -> Dict[str, Any]:
        return {"_id": DOCUMENT_ID, "data": self.data, "updatedAt": self.updated_at.isoformat()}


class DatasetStore(ABC):
    backend = "abstract"

    def __init__(self, secret: Optional[str]) -> None:
        self._secret = secret

    def load(self) -> Optional[StoredDocument]:
        return self._read()

    def save(self, data: Dict[str, Any], credential: Optional[str]) -> StoredDocument:
        """Replace the stored document (created if absent). Last write wins."""
        self._authorize(credential, "save")
        doc = StoredDocument(data=data, updated_at=datetime.now(timezone.utc))
        self._write(doc)
        logger.info("Stored dataset document in %s store", self.backend)
        return doc

    def clear(self, credential: Optional[str]) -> None:
        self._authorize(credential, "clear")
        self._delete()
        logger.info("Cleared dataset document from %s store", self.backend)

    def ping(self) -> None:
        """Raise ReadError when the backing mechanism is unreachable."""

    def _authorize(self, credential: Optional[str], action: str) -> None:
        if not self._secret:
            logger.warning("Rejected %s: no admin password is configured", action)
        require_credential(credential, self._secret)

    @abstractmethod
    def _read(self) -> Optional[StoredDocument]: ...

    @abstractmethod
    def _write(self, doc: StoredDocument) -> None: ...

    @abstractmethod
    def _delete(self) -> None: ...


class MemoryDatasetStore(DatasetStore):
    backend = "memory"

    def __init__(self, secret: Optional[str]) -> None:
        super().__init__(secret)
        self._lock = threading.Lock()
        self._doc: Optional[StoredDocument] = None

    def _read(self) -> Optional[StoredDocument]:
        with self._lock:
            return self._doc

    def _write(self, doc: StoredDocument) -> None:
        with self._lock:
            self._doc = doc

    def _delete(self) -> None:
        with self._lock:
            self._doc = None


class JsonFileDatasetStore(DatasetStore):
    backend = "file"

    def __init__(self, path: Path, secret: Optional[str]) -> None:
        super().__init__(secret)
        self.path = Path(path)
        self._lock = threading.Lock()

    def ping(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReadError(f"Dataset storage at {self.path.parent} is not accessible.") from exc
        if not os.access(self.path.parent, os.W_OK):
            raise ReadError(f"Dataset storage at {self.path.parent} is not writable.")

    def _read(self) -> Optional[StoredDocument]:
        with self._lock:
            if not self.path.exists():
                return None
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except OSError as exc:
                raise ReadError(f"Failed to read stored dataset at {self.path}.") from exc
            except ValueError as exc:
                raise ReadError(f"Stored dataset at {self.path} is not valid JSON.") from exc
        if not isinstance(raw, dict) or raw.get("_id") != DOCUMENT_ID or not isinstance(raw.get("data"), dict):
            raise ReadError(f"Stored dataset at {self.path} has an unexpected shape.")
        updated_at = pd.to_datetime(raw.get("updatedAt"), errors="coerce", utc=True)
        if pd.isna(updated_at):
            raise ReadError(f"Stored dataset at {self.path} has an invalid updatedAt.")
        return StoredDocument(data=raw["data"], updated_at=updated_at.to_pydatetime())

    def _write(self, doc: StoredDocument) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=".letterease-", suffix=".json", dir=self.path.parent)
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        json.dump(doc.to_json(), fh)
                    os.replace(tmp_name, self.path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                raise ReadError(f"Failed to write stored dataset at {self.path}.") from exc

    def _delete(self) -> None:
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                raise ReadError(f"Failed to delete stored dataset at {self.path}.") from exc


def build_store(settings: Settings) -> DatasetStore:
    if settings.store_backend == "memory":
        return MemoryDatasetStore(settings.admin_password)
    return JsonFileDatasetStore(settings.store_path, settings.admin_password)
