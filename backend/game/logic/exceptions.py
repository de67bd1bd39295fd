"""Typed domain exceptions for the ledger core.

All rule violations raised by the validation module and the rules engine
use ValidationError rather than raw ValueError. The persistence gateway
raises StorageError. Both derive from LedgerError so the coordinator can
catch-and-surface at one boundary.
"""


class LedgerError(Exception):
    """Base exception for ledger core failures."""


class ValidationError(LedgerError):
    """An entity or operation input violates a structural invariant.

    Raised synchronously on the first violation found. The message is
    human-readable and meant to be shown to the end user as-is.
    """


class StorageError(LedgerError):
    """A persistence operation failed.

    Attributes:
        operation: Name of the gateway operation that failed (e.g. "save").
        cause: The underlying exception, if any. Also set as __cause__ when
            raised with ``raise ... from``.

    """

    def __init__(self, message: str, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(message)


class DataCorruptionError(StorageError):
    """A stored record failed to deserialize or validate.

    Internal signal of the persistence gateway: load paths convert it into
    delete-and-return-empty and never let it escape.
    """

    def __init__(self, key: str, cause: BaseException | None = None) -> None:
        self.key = key
        super().__init__(f"Data corruption detected for key: {key}", "validation", cause)
