"""
Storage Services Package

Provides the abstract ledger storage interface and concrete implementations.
The JSON file store is the default backend, but it is designed to be swappable.
"""

from loan_ledger.services.storage.interface import (
    DeserializationError,
    LedgerStorageInterface,
    StorageError,
)
from loan_ledger.services.storage.json_file import JsonFileLedgerStorage
from loan_ledger.services.storage.memory import InMemoryLedgerStorage
from loan_ledger.services.storage.serialization import decode_loans, encode_loans

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "DeserializationError",
    "StorageError",
    # Implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    # Codec
    "decode_loans",
    "encode_loans",
]
