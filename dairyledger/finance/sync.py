"""Mini README: Keep derived ledger entries in step with herd records.

Structure:
    * CostBearingRecord - the typed contract every record workflow hands over.
    * LinkPolicy - transaction type and category used for a record type.
    * SyncOutcome / SyncResult - what the sync did and the entry it touched.
    * LedgerSync - find-or-create/update/retract procedure over a LedgerStore.

A record with a positive amount owns exactly one ledger entry, found through
its source link pair (or, for older rows, its ``"<RecordType>:<id>"``
description). The entry is created on first save, updated on later saves and
deleted once the amount is cleared or the record goes away. Non-positive
amounts never reach the store's create or update calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional

from ..errors import DuplicateLinkError, ValidationError
from ..logging_utils import get_logger
from .ledger import LedgerEntry, LedgerEntryDraft, LedgerStore, TransactionType

LOGGER = get_logger(__name__)

FEEDING_RECORD = "FeedingRecord"
BREEDING_RECORD = "BreedingRecord"
PRODUCTION_RECORD = "ProductionRecord"


def link_key(record_type: str, record_id: str) -> str:
    """Return the description key that ties an entry to its source record."""

    return f"{record_type}:{record_id}"


@dataclass(frozen=True, slots=True)
class LinkPolicy:
    """Ledger classification applied to entries derived from a record type."""

    transaction_type: TransactionType
    category: str


DEFAULT_POLICIES: Dict[str, LinkPolicy] = {
    FEEDING_RECORD: LinkPolicy(TransactionType.EXPENSE, "Feed"),
    BREEDING_RECORD: LinkPolicy(TransactionType.EXPENSE, "Breeding"),
    PRODUCTION_RECORD: LinkPolicy(TransactionType.INCOME, "Milk Sales"),
}


@dataclass(frozen=True, slots=True)
class CostBearingRecord:
    """Minimal view of a domain record that may carry money."""

    record_type: str
    record_id: str
    animal_id: Optional[str]
    amount: Optional[int]
    date: date

    @property
    def link_key(self) -> str:
        return link_key(self.record_type, self.record_id)

    @property
    def has_amount(self) -> bool:
        return self.amount is not None and self.amount > 0


class SyncOutcome(str, Enum):
    """Enumerate what a sync run did to the ledger."""

    CREATED = "created"
    UPDATED = "updated"
    RETRACTED = "retracted"
    SKIPPED = "skipped"


@dataclass(slots=True)
class SyncResult:
    """Outcome of a sync run and the entry it left behind, if any."""

    outcome: SyncOutcome
    description: str
    entry: Optional[LedgerEntry] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "outcome": self.outcome.value,
            "description": self.description,
            "entry": self.entry.as_dict() if self.entry else None,
        }


class LedgerSync:
    """Find, create, update or retract the ledger entry linked to a record."""

    def __init__(
        self,
        store: LedgerStore,
        policies: Optional[Dict[str, LinkPolicy]] = None,
    ) -> None:
        self.store = store
        self.policies = dict(policies or DEFAULT_POLICIES)

    def policy_for(self, record_type: str) -> LinkPolicy:
        """Return the ledger classification for ``record_type``."""

        try:
            return self.policies[record_type]
        except KeyError as error:
            raise ValidationError(f"No ledger policy for record type '{record_type}'") from error

    def find_linked(self, record_type: str, record_id: str, *, owner_id: str) -> Optional[LedgerEntry]:
        """Return the entry linked to a record, trying the link pair first."""

        entry = self.store.find_by_source(record_type, record_id, owner_id=owner_id)
        if entry is None:
            entry = self.store.find_by_description(link_key(record_type, record_id), owner_id=owner_id)
        return entry

    def sync(self, record: CostBearingRecord, *, owner_id: str) -> SyncResult:
        """Bring the linked ledger entry in line with ``record``."""

        policy = self.policy_for(record.record_type)
        key = record.link_key
        existing = self.find_linked(record.record_type, record.record_id, owner_id=owner_id)

        if not record.has_amount:
            if existing is None:
                LOGGER.debug("No amount on %s; nothing to sync", key)
                return SyncResult(SyncOutcome.SKIPPED, key)
            return self._retract(existing, key, owner_id=owner_id)

        if existing is not None:
            return self._update(existing, record, owner_id=owner_id)

        draft = LedgerEntryDraft(
            transaction_type=policy.transaction_type,
            category=policy.category,
            amount=record.amount,
            transaction_date=record.date,
            animal_id=record.animal_id,
            description=key,
            source_record_type=record.record_type,
            source_record_id=record.record_id,
        )
        try:
            entry = self.store.create(draft, owner_id=owner_id)
        except DuplicateLinkError:
            # Another writer linked an entry between our lookup and create.
            existing = self.store.find_by_source(record.record_type, record.record_id, owner_id=owner_id)
            if existing is None:
                raise
            LOGGER.warning("Link %s created concurrently; updating it instead", key)
            return self._update(existing, record, owner_id=owner_id)
        LOGGER.info("Created ledger entry %s for %s", entry.entry_id, key)
        return SyncResult(SyncOutcome.CREATED, key, entry)

    def retract(self, record_type: str, record_id: str, *, owner_id: str) -> SyncResult:
        """Delete the entry linked to a record that no longer carries money."""

        key = link_key(record_type, record_id)
        existing = self.find_linked(record_type, record_id, owner_id=owner_id)
        if existing is None:
            return SyncResult(SyncOutcome.SKIPPED, key)
        return self._retract(existing, key, owner_id=owner_id)

    def _update(self, existing: LedgerEntry, record: CostBearingRecord, *, owner_id: str) -> SyncResult:
        entry = self.store.update(
            existing.entry_id,
            {
                "amount": record.amount,
                "transaction_date": record.date,
                "description": record.link_key,
                "animal_id": record.animal_id,
                "source_record_type": record.record_type,
                "source_record_id": record.record_id,
            },
            owner_id=owner_id,
        )
        LOGGER.info("Updated ledger entry %s for %s", entry.entry_id, record.link_key)
        return SyncResult(SyncOutcome.UPDATED, record.link_key, entry)

    def _retract(self, existing: LedgerEntry, key: str, *, owner_id: str) -> SyncResult:
        self.store.delete(existing.entry_id, owner_id=owner_id)
        LOGGER.info("Retracted ledger entry %s for %s", existing.entry_id, key)
        return SyncResult(SyncOutcome.RETRACTED, key)
