"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ImportDataError(DomainError):
    """Imported document is malformed or structurally invalid."""


class SearchPatternError(DomainError):
    """Search pattern could not be compiled."""


class StoreError(DomainError):
    """Store used in a way it does not support."""


class CorruptDataError(DomainError):
    """Persisted document is unreadable.

    Only the persistence adapter raises this; the store converts it into
    "use defaults".
    """


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def unknown_fields(kind: str, fields: list[str]) -> str:
    """Return message for fields a record does not support."""
    names = ", ".join(f"'{name}'" for name in sorted(fields))
    return f"Unknown {kind} field{'s' if len(fields) != 1 else ''}: {names}"


def missing_import_field(index: int, transaction_id: object, field: str) -> str:
    """Return message for an imported transaction missing a field."""
    return f"{import_record_label(index, transaction_id)}: missing required field '{field}'"


def invalid_import_field(
    index: int, transaction_id: object, field: str, reason: str
) -> str:
    """Return message for an imported transaction with a bad field value."""
    return f"{import_record_label(index, transaction_id)}: invalid '{field}' ({reason})"


def import_record_label(index: int, transaction_id: object) -> str:
    """Return a label identifying an imported record."""
    if isinstance(transaction_id, str) and transaction_id:
        return f"Transaction {index} ({transaction_id})"
    return f"Transaction {index}"


def invalid_search_pattern(pattern: str, reason: str) -> str:
    """Return message for a search pattern that does not compile."""
    return f"Invalid search pattern '{pattern}': {reason}"


def corrupt_document(key: str, reason: str) -> str:
    """Return message for a persisted document that cannot be decoded."""
    return f"Stored document '{key}' is corrupt: {reason}"
