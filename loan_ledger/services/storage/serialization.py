"""JSON encoding of the full ledger snapshot."""

from typing import Sequence, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from loan_ledger.models.loan import Loan
from loan_ledger.services.storage.interface import DeserializationError

_LOANS_ADAPTER = TypeAdapter(list[Loan])


def encode_loans(loans: Sequence[Loan]) -> bytes:
    """Encode loans as a JSON array. Decimals are written as strings."""
    return _LOANS_ADAPTER.dump_json(list(loans), indent=2)


def decode_loans(raw: Union[str, bytes]) -> list[Loan]:
    """
    Decode a JSON array of loans.

    An empty blob means nothing was saved yet.

    Raises:
        DeserializationError: If the blob is not valid JSON or does not
            match the Loan schema
    """
    if not raw.strip():
        return []
    try:
        return _LOANS_ADAPTER.validate_json(raw)
    except PydanticValidationError as e:
        raise DeserializationError(
            f"Stored ledger is malformed ({e.error_count()} errors): {e.errors()[0]['msg']}"
        ) from e
