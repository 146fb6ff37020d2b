"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON file is the default backend because:
1. The ledger is small (one person's loans)
2. The user can open, back up or move the file by hand
3. No database setup required

Writes go to a temporary file first and are then moved over the old
snapshot with os.replace, so a crash mid-write never leaves a
half-written ledger behind.
"""

import os
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from loan_ledger.config import get_settings
from loan_ledger.models.loan import Loan
from loan_ledger.services.storage.interface import (
    LedgerStorageInterface,
    StorageError,
)
from loan_ledger.services.storage.serialization import decode_loans, encode_loans


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Stores the whole ledger as one JSON array in a file.

    Transient write failures (OSError) are retried with exponential
    backoff before being reported as StorageError.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        retry_attempts: Optional[int] = None,
    ):
        if path is None or retry_attempts is None:
            settings = get_settings().ledger
            path = path if path is not None else settings.data_path
            retry_attempts = retry_attempts or settings.save_retry_attempts
        self._path = Path(path)
        self._retry_attempts = retry_attempts
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Loan]:
        if not self._path.exists():
            self._logger.info("ledger_file_missing", path=str(self._path))
            return []

        try:
            raw = self._path.read_bytes()
        except OSError as e:
            raise StorageError(f"Could not read ledger file {self._path}: {e}") from e

        return decode_loans(raw)

    def save(self, loans: Sequence[Loan]) -> None:
        payload = encode_loans(loans)
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write(payload)
        except OSError as e:
            raise StorageError(f"Could not write ledger file {self._path}: {e}") from e

        self._logger.debug("ledger_saved", path=str(self._path), loan_count=len(loans))

    def _write(self, payload: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
