"""
Custom exception hierarchy for ZettelKB.

Provides structured error types for the knowledge-base engine.
All exceptions inherit from ZettelKBError for easy catching; each
carries an optional context dictionary (address, operation, ...).
"""


class ZettelKBError(Exception):
    """
    Base exception for all ZettelKB errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize ZettelKB error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(ZettelKBError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    pass


class NoteStoreError(StoreError):
    """
    Note store operation errors.
    Raised when the backing database fails.
    """

    pass


class ValidationError(ZettelKBError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    pass


class InvalidAddressError(ValidationError):
    """
    Malformed Luhmann address.
    Raised when a string does not match the alternating digit/letter grammar.
    """

    pass


class EmptyQueryError(ValidationError):
    """Raised when a search is issued with an empty query."""

    pass


class EmptyIndexError(ValidationError):
    """Raised when an index card is requested for a note without children and empty indexes are disabled."""

    pass


class SelfLinkError(ValidationError):
    """Raised when a link or continuation would connect a note to itself."""

    pass


class NotFoundError(ZettelKBError):
    """
    Resource not found errors.
    Raised when a requested note doesn't exist.
    """

    pass


class UnknownAddressError(NotFoundError):
    """
    Relation endpoint missing.
    Raised when a link or continuation references an address with no note.
    """

    pass


class ConflictError(ZettelKBError):
    """
    Conflicting state errors.
    Raised when a write collides with existing data.
    """

    pass


class DuplicateAddressError(ConflictError):
    """Raised when an explicit address is already occupied."""

    pass


class AllocationConflictError(ConflictError):
    """
    Allocation retry budget exhausted.
    Raised when concurrent writers keep claiming the computed address.
    """

    pass


class ContinuationConflictError(ConflictError):
    """Raised when a note already continues to a different note."""

    pass


class CycleDetectedError(ConflictError):
    """Raised by strict continuation traversal when the chain loops back."""

    pass


class ConfigurationError(ZettelKBError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
