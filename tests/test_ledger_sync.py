"""Mini README: Tests for the record-to-ledger sync procedure.

These tests pin down the link contract: one entry per source record that
follows later edits, no store writes for non-positive amounts, retraction
when money disappears, and recovery when a concurrent writer wins the race
between lookup and create.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

import pytest

from dairyledger.errors import ValidationError
from dairyledger.finance import (
    BREEDING_RECORD,
    FEEDING_RECORD,
    PRODUCTION_RECORD,
    CostBearingRecord,
    InMemoryLedgerStore,
    LedgerEntry,
    LedgerEntryDraft,
    LedgerSync,
    SyncOutcome,
    TransactionType,
)

OWNER = "farm-a"


class RecordingLedgerStore(InMemoryLedgerStore):
    """Ledger store that remembers which write calls reached it."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)
        self.calls: List[str] = []

    def create(self, draft: LedgerEntryDraft, *, owner_id: str) -> LedgerEntry:
        self.calls.append("create")
        return super().create(draft, owner_id=owner_id)

    def update(self, entry_id: str, updates: dict, *, owner_id: str) -> LedgerEntry:
        self.calls.append("update")
        return super().update(entry_id, updates, owner_id=owner_id)


class RacingLedgerStore(InMemoryLedgerStore):
    """Ledger store whose first lookup misses an entry another writer adds."""

    def __init__(self) -> None:
        super().__init__()
        self._raced = False

    def find_by_source(self, record_type: str, record_id: str, *, owner_id: str) -> Optional[LedgerEntry]:
        if not self._raced:
            self._raced = True
            super().create(
                LedgerEntryDraft(
                    transaction_type=TransactionType.EXPENSE,
                    category="Feed",
                    amount=100,
                    transaction_date=date(2024, 1, 1),
                    description=f"{record_type}:{record_id}",
                    source_record_type=record_type,
                    source_record_id=record_id,
                ),
                owner_id=owner_id,
            )
            return None
        return super().find_by_source(record_type, record_id, owner_id=owner_id)

    def find_by_description(self, description: str, *, owner_id: str) -> Optional[LedgerEntry]:
        return None


def _record(record_type: str = FEEDING_RECORD, record_id: str = "f1", amount: Optional[int] = 1500) -> CostBearingRecord:
    return CostBearingRecord(
        record_type=record_type,
        record_id=record_id,
        animal_id="cow-7",
        amount=amount,
        date=date(2024, 5, 1),
    )


def test_first_sync_creates_linked_expense() -> None:
    store = InMemoryLedgerStore()
    result = LedgerSync(store).sync(_record(), owner_id=OWNER)

    assert result.outcome is SyncOutcome.CREATED
    entry = result.entry
    assert entry.transaction_type is TransactionType.EXPENSE
    assert entry.category == "Feed"
    assert entry.amount == 1500
    assert entry.description == "FeedingRecord:f1"
    assert entry.animal_id == "cow-7"
    assert entry.link == ("FeedingRecord", "f1")


def test_resync_updates_the_same_entry() -> None:
    """Editing the cost moves the amount on the existing entry."""

    store = InMemoryLedgerStore()
    sync = LedgerSync(store)
    created = sync.sync(_record(amount=500), owner_id=OWNER).entry

    result = sync.sync(_record(amount=750), owner_id=OWNER)

    assert result.outcome is SyncOutcome.UPDATED
    assert result.entry.entry_id == created.entry_id
    assert result.entry.amount == 750
    assert len(store.list_entries(OWNER)) == 1


@pytest.mark.parametrize("amount", [None, 0, -5])
def test_non_positive_amount_never_writes(amount: Optional[int]) -> None:
    store = RecordingLedgerStore()

    result = LedgerSync(store).sync(_record(amount=amount), owner_id=OWNER)

    assert result.outcome is SyncOutcome.SKIPPED
    assert store.calls == []
    assert store.list_entries(OWNER) == []


def test_clearing_amount_retracts_linked_entry() -> None:
    store = RecordingLedgerStore()
    sync = LedgerSync(store)
    sync.sync(_record(amount=900), owner_id=OWNER)

    result = sync.sync(_record(amount=0), owner_id=OWNER)

    assert result.outcome is SyncOutcome.RETRACTED
    assert store.calls == ["create"]
    assert store.list_entries(OWNER) == []


def test_retract_without_entry_is_skipped() -> None:
    result = LedgerSync(InMemoryLedgerStore()).retract(BREEDING_RECORD, "b9", owner_id=OWNER)

    assert result.outcome is SyncOutcome.SKIPPED
    assert result.description == "BreedingRecord:b9"


def test_record_types_never_share_entries() -> None:
    """Feeding and breeding costs for one animal on one day stay separate."""

    store = InMemoryLedgerStore()
    sync = LedgerSync(store)
    feeding = sync.sync(_record(FEEDING_RECORD, "x1", 400), owner_id=OWNER).entry
    breeding = sync.sync(_record(BREEDING_RECORD, "x1", 400), owner_id=OWNER).entry

    assert feeding.entry_id != breeding.entry_id
    assert {feeding.description, breeding.description} == {"FeedingRecord:x1", "BreedingRecord:x1"}
    assert breeding.category == "Breeding"


def test_production_sale_is_income() -> None:
    entry = LedgerSync(InMemoryLedgerStore()).sync(_record(PRODUCTION_RECORD, "p1", 1200), owner_id=OWNER).entry

    assert entry.transaction_type is TransactionType.INCOME
    assert entry.category == "Milk Sales"


def test_legacy_description_entry_is_adopted() -> None:
    """Entries written before link pairs existed are found by description."""

    store = InMemoryLedgerStore(
        entries=[
            LedgerEntry(
                entry_id="fin_0001",
                owner_id=OWNER,
                transaction_type=TransactionType.EXPENSE,
                category="Breeding",
                amount=3000,
                transaction_date=date(2023, 12, 1),
                description="BreedingRecord:b1",
            )
        ]
    )

    result = LedgerSync(store).sync(_record(BREEDING_RECORD, "b1", 3500), owner_id=OWNER)

    assert result.outcome is SyncOutcome.UPDATED
    assert result.entry.entry_id == "fin_0001"
    assert result.entry.transaction_date == date(2024, 5, 1)
    assert store.find_by_source(BREEDING_RECORD, "b1", owner_id=OWNER).entry_id == "fin_0001"


def test_concurrent_create_falls_back_to_update() -> None:
    store = RacingLedgerStore()

    result = LedgerSync(store).sync(_record(amount=2000), owner_id=OWNER)

    assert result.outcome is SyncOutcome.UPDATED
    assert result.entry.amount == 2000
    assert len(store.list_entries(OWNER)) == 1


def test_unknown_record_type_is_rejected() -> None:
    with pytest.raises(ValidationError):
        LedgerSync(InMemoryLedgerStore()).sync(_record("HealthRecord", "h1", 100), owner_id=OWNER)
