from django.core.exceptions import ValidationError

# ---------------------------------------------
# Ledger error taxonomy
# Bad input → ValidationError (and subclasses)
# Missing rows → NotFoundError
# Double submission / uniqueness → ConflictError
# Storage failure → PersistenceError
# ---------------------------------------------


class UnbalancedJournalError(ValidationError):
    """Raised when a JournalEntry fails double-entry balance check."""

    def __init__(self, message, params=None):
        super().__init__(message, code="unbalanced_entry", params=params)


class InvalidStateError(ValidationError):
    """Raised when a document is asked for a transition its status forbids."""

    def __init__(self, message, params=None):
        super().__init__(message, code="invalid_state", params=params)


class NotFoundError(Exception):
    """Base for lookups that found nothing."""
    kind = "not_found"


class AccountNotFound(NotFoundError):
    kind = "account_not_found"


class ConflictError(Exception):
    """Base for requests that collide with already-persisted state."""
    kind = "conflict"


class DuplicateEntryNumber(ConflictError):
    """Raised when a caller-supplied entry number is already taken."""
    kind = "duplicate_entry_number"


class AlreadyReconciled(ConflictError):
    """Raised on a second reconcile of the same bank transaction."""
    kind = "already_reconciled"


class AlreadyPostedDifferentPayload(ConflictError):
    """Raised when a JournalEntry already posted with different payload """
    kind = "already_posted_different_payload"


class PersistenceError(Exception):
    """Storage unavailable or failed mid-operation; nothing was committed."""
    kind = "persistence_error"
