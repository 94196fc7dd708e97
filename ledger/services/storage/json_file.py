"""
JSON File Storage

Persists the whole LedgerSnapshot as one JSON document:

    {"profiles": [...], "activeProfileId": "..."}

Field names use the camelCase aliases, so files written by earlier
versions (with flat transferId/patrimonioId fields) still load; the
models lift those into the tagged linkage on the way in.

Writes go to a temporary file in the same directory and are then moved
over the target, so a crash mid-write never leaves a truncated ledger.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger.config import get_settings
from ledger.models.ledger import LedgerSnapshot
from ledger.services.storage.interface import (
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileProfileStorage(ProfileStorageInterface):
    """
    Snapshot storage backed by a single JSON file.

    Transient OS errors while writing are retried with exponential backoff.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.path
        attempts = retry_attempts or settings.persist_retry_attempts

        self._write_with_retry = retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )(self._write)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LedgerSnapshot:
        if not self._path.exists():
            logger.info("snapshot_file_missing", path=str(self._path))
            return LedgerSnapshot()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageConnectionError(f"Failed to read {self._path}: {e}", cause=e)

        if not raw.strip():
            return LedgerSnapshot()

        try:
            return LedgerSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Stored ledger in {self._path} is invalid: {e}", cause=e)

    def save(self, snapshot: LedgerSnapshot) -> bool:
        payload = snapshot.model_dump_json(by_alias=True, indent=2)
        try:
            self._write_with_retry(payload)
        except OSError as e:
            raise StorageConnectionError(f"Failed to write {self._path}: {e}", cause=e)
        logger.debug("snapshot_written", path=str(self._path), size=len(payload))
        return True

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
