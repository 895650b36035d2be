"""Domain layer: the record store contract, tagged results and validation.

Nothing in this package performs I/O. Stores implement ``RecordStore`` and
report every expected failure as a ``Failure`` value instead of raising.
"""

from src.domain.results import (
    ErrorKind,
    Failure,
    FieldViolation,
    Result,
    Success,
)
from src.domain.store import RecordStore
from src.domain.validation import validate, validate_identifier

__all__ = [
    "ErrorKind",
    "Failure",
    "FieldViolation",
    "RecordStore",
    "Result",
    "Success",
    "validate",
    "validate_identifier",
]
