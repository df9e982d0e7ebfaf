"""Utility modules for ZettelKB."""

from zettelkb.utils.exceptions import (
    AllocationConflictError,
    ConfigurationError,
    ConflictError,
    ContinuationConflictError,
    CycleDetectedError,
    DuplicateAddressError,
    EmptyIndexError,
    EmptyQueryError,
    InvalidAddressError,
    NotFoundError,
    NoteStoreError,
    SelfLinkError,
    StoreError,
    UnknownAddressError,
    ValidationError,
    ZettelKBError,
)
from zettelkb.utils.logger import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    # Exceptions
    "ZettelKBError",
    "StoreError",
    "NoteStoreError",
    "ValidationError",
    "InvalidAddressError",
    "EmptyQueryError",
    "EmptyIndexError",
    "SelfLinkError",
    "NotFoundError",
    "UnknownAddressError",
    "ConflictError",
    "DuplicateAddressError",
    "AllocationConflictError",
    "ContinuationConflictError",
    "CycleDetectedError",
    "ConfigurationError",
]
