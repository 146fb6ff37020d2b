"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file for a real database later
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from storage implementation

The contract is a blob store: the whole ledger is loaded at once and
every save overwrites the whole snapshot. There are no partial writes,
no transactions and no locking, because there is exactly one writer.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from loan_ledger.models.loan import Loan


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (JSON file, key-value store, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self) -> list[Loan]:
        """
        Load the last saved ledger.

        Returns:
            The saved loans in their saved order, or an empty list
            if nothing was saved yet

        Raises:
            DeserializationError: If the stored snapshot is corrupt
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, loans: Sequence[Loan]) -> None:
        """
        Overwrite the stored snapshot with the given loans.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DeserializationError(StorageError):
    """The stored snapshot could not be decoded into loans."""
    pass
