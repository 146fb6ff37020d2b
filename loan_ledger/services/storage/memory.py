"""In-memory storage, used by tests and for throwaway sessions."""

from typing import Optional, Sequence

from loan_ledger.models.loan import Loan
from loan_ledger.services.storage.interface import LedgerStorageInterface
from loan_ledger.services.storage.serialization import decode_loans, encode_loans


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    Keeps the encoded snapshot in memory.

    The snapshot goes through the same JSON codec as the file store,
    so a load returns fresh copies, never the saved objects themselves.
    """

    def __init__(self, blob: Optional[bytes] = None):
        self._blob = blob
        self.save_count = 0

    @property
    def blob(self) -> Optional[bytes]:
        return self._blob

    def load(self) -> list[Loan]:
        if self._blob is None:
            return []
        return decode_loans(self._blob)

    def save(self, loans: Sequence[Loan]) -> None:
        self._blob = encode_loans(loans)
        self.save_count += 1
