"""Mini README: Error taxonomy shared by the ledger, sync and workflows.

Structure:
    * LedgerError - base class for every domain failure.
    * ValidationError - malformed or missing fields, non-positive amounts.
    * DuplicateLinkError - a ledger entry already holds the source link pair.
    * AuthenticationError - the caller has no owner identity.
    * NotFoundError - an id does not resolve for the calling owner.
    * BackendUnavailableError - transient storage or network failure.

The web layer maps each class to an HTTP status; workflows catch
``LedgerError`` around the sync step so a failed sync never undoes a saved
record.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for record-keeping failures."""


class ValidationError(LedgerError):
    """Raised before any write when input fields are invalid."""


class DuplicateLinkError(ValidationError):
    """Raised when a second ledger entry claims an existing source link."""

    def __init__(self, record_type: str, record_id: str) -> None:
        super().__init__(f"A ledger entry is already linked to {record_type}:{record_id}")
        self.record_type = record_type
        self.record_id = record_id


class AuthenticationError(LedgerError):
    """Raised when a write is attempted without an authenticated owner."""


class NotFoundError(LedgerError):
    """Raised when a ledger entry or domain record id is unknown."""


class BackendUnavailableError(LedgerError):
    """Raised when the backing store cannot be reached."""
