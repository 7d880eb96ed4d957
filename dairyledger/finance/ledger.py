"""Mini README: Ledger store for farm income and expense transactions.

Structure:
    * TransactionType - enum representing income versus expense entries.
    * LedgerEntryDraft - caller-supplied fields for a new entry.
    * LedgerEntry - stored entry with identifiers, owner and timestamps.
    * LedgerStore - abstract query/create/update/delete boundary.
    * InMemoryLedgerStore - thread-safe implementation used by the service.

Entries derived from herd records carry two links back to their source: the
``"<RecordType>:<recordId>"`` description key and an explicit
``(source_record_type, source_record_id)`` pair. The pair is unique per
owner; the description is only a lookup convention, so duplicates found
through it resolve to the most recently written entry.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import (
    AuthenticationError,
    DuplicateLinkError,
    NotFoundError,
    ValidationError,
)
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

DEMO_OWNER_ID = "demo-owner"


class TransactionType(str, Enum):
    """Enumerate the supported transaction categories."""

    INCOME = "Income"
    EXPENSE = "Expense"

    @classmethod
    def from_str(cls, value: str) -> "TransactionType":
        """Coerce arbitrary casing into a valid transaction type."""

        try:
            normalised = value.strip().capitalize()
            return cls(normalised)
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Unsupported transaction type: {value}") from error


def parse_amount(value: object) -> Optional[int]:
    """Parse a monetary input into whole units, rounding half up.

    Returns ``None`` for absent or blank values so callers can tell "no cost"
    apart from an explicit zero.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation as error:
        raise ValidationError(f"Amount '{value}' is not a number") from error
    if not amount.is_finite():
        raise ValidationError(f"Amount '{value}' is not a finite number")
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_date(value: object) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as error:
            raise ValidationError(f"Invalid ISO date: {value}") from error
    raise ValidationError("Dates must be provided as ISO strings or date/datetime instances.")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class LedgerEntryDraft:
    """Fields supplied when creating a ledger entry."""

    transaction_type: TransactionType
    category: str
    amount: object
    transaction_date: object
    animal_id: Optional[str] = None
    description: Optional[str] = None
    source_record_type: Optional[str] = None
    source_record_id: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_contact: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_contact: Optional[str] = None
    receipt_photo_url: Optional[str] = None


@dataclass(slots=True)
class LedgerEntry:
    """Represent one stored income or expense transaction."""

    entry_id: str
    owner_id: str
    transaction_type: TransactionType
    category: str
    amount: int
    transaction_date: date
    animal_id: Optional[str] = None
    description: Optional[str] = None
    source_record_type: Optional[str] = None
    source_record_id: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_contact: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_contact: Optional[str] = None
    receipt_photo_url: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def link(self) -> Optional[Tuple[str, str]]:
        """Return the explicit source link pair, if the entry has one."""

        if self.source_record_type and self.source_record_id:
            return (self.source_record_type, self.source_record_id)
        return None

    def as_dict(self) -> Dict[str, object]:
        """Export the entry with serialisable values."""

        return {
            "entry_id": self.entry_id,
            "transaction_type": self.transaction_type.value,
            "category": self.category,
            "amount": self.amount,
            "transaction_date": self.transaction_date.isoformat(),
            "animal_id": self.animal_id,
            "description": self.description,
            "source_record_type": self.source_record_type,
            "source_record_id": self.source_record_id,
            "buyer_name": self.buyer_name,
            "buyer_contact": self.buyer_contact,
            "supplier_name": self.supplier_name,
            "supplier_contact": self.supplier_contact,
            "receipt_photo_url": self.receipt_photo_url,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


_OPTIONAL_TEXT_FIELDS = {
    "animal_id",
    "description",
    "source_record_type",
    "source_record_id",
    "buyer_name",
    "buyer_contact",
    "supplier_name",
    "supplier_contact",
    "receipt_photo_url",
}


def _positive_amount(value: object) -> int:
    amount = parse_amount(value)
    if amount is None or amount <= 0:
        raise ValidationError(f"Amount must be a positive number, got {value!r}")
    return amount


def _coerce_fields(updates: Dict[str, object]) -> Dict[str, object]:
    """Validate and coerce a partial update payload."""

    coerced: Dict[str, object] = {}
    for key, value in updates.items():
        if key == "transaction_type":
            if isinstance(value, TransactionType):
                coerced[key] = value
            else:
                coerced[key] = TransactionType.from_str(str(value))
        elif key == "transaction_date":
            coerced[key] = parse_date(value)
        elif key == "amount":
            coerced[key] = _positive_amount(value)
        elif key == "category":
            if value is None or not str(value).strip():
                raise ValidationError("Category cannot be blank")
            coerced[key] = str(value).strip()
        elif key in _OPTIONAL_TEXT_FIELDS:
            coerced[key] = str(value) if value is not None else None
        else:
            raise ValidationError(f"Update of field '{key}' is not supported.")
    return coerced


def _require_owner(owner_id: Optional[str]) -> str:
    if not owner_id or not str(owner_id).strip():
        raise AuthenticationError("An authenticated owner is required")
    return str(owner_id)


class LedgerStore(ABC):
    """Storage boundary consumed by the sync procedure and the web layer."""

    @abstractmethod
    def find_by_description(self, description: str, *, owner_id: str) -> Optional[LedgerEntry]:
        """Return the entry carrying ``description`` or ``None``."""

    @abstractmethod
    def find_by_source(
        self, record_type: str, record_id: str, *, owner_id: str
    ) -> Optional[LedgerEntry]:
        """Return the entry linked to a source record or ``None``."""

    @abstractmethod
    def create(self, draft: LedgerEntryDraft, *, owner_id: str) -> LedgerEntry:
        """Persist a new entry and return it with identifiers assigned."""

    @abstractmethod
    def update(self, entry_id: str, updates: Dict[str, object], *, owner_id: str) -> LedgerEntry:
        """Apply a partial update to an existing entry."""

    @abstractmethod
    def delete(self, entry_id: str, *, owner_id: str) -> None:
        """Remove an entry permanently."""

    @abstractmethod
    def get(self, entry_id: str, *, owner_id: str) -> LedgerEntry:
        """Return one entry or raise ``NotFoundError``."""

    @abstractmethod
    def list_entries(
        self,
        owner_id: str,
        *,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        animal_id: Optional[str] = None,
    ) -> List[LedgerEntry]:
        """Return matching entries ordered by most recent date first."""

    def summarise(self, owner_id: str) -> Dict[str, int]:
        """Aggregate income, expenses and balance for finance cards."""

        entries = self.list_entries(owner_id)
        total_income = sum(
            entry.amount for entry in entries if entry.transaction_type is TransactionType.INCOME
        )
        total_expenses = sum(
            entry.amount for entry in entries if entry.transaction_type is TransactionType.EXPENSE
        )
        return {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "balance": total_income - total_expenses,
            "entry_count": len(entries),
        }

    def export_snapshot(self, owner_id: str) -> Dict[str, List[Dict[str, object]]]:
        """Export entries grouped by type for JSON responses."""

        income: List[Dict[str, object]] = []
        expenses: List[Dict[str, object]] = []
        for entry in self.list_entries(owner_id):
            if entry.transaction_type is TransactionType.INCOME:
                income.append(entry.as_dict())
            else:
                expenses.append(entry.as_dict())
        return {"income": income, "expenses": expenses}


class InMemoryLedgerStore(LedgerStore):
    """Keep ledger entries in process memory behind a lock."""

    def __init__(
        self,
        entries: Optional[Iterable[LedgerEntry]] = None,
        *,
        seed_demo: bool = False,
    ) -> None:
        self._entries: Dict[str, LedgerEntry] = {}
        self._links: Dict[Tuple[str, str, str], str] = {}
        self._write_order: Dict[str, int] = {}
        self._sequence = 0
        self._writes = 0
        self._lock = threading.RLock()
        for entry in entries or ():
            self._register(entry)
        if seed_demo:
            self._seed_demo_entries()
        LOGGER.debug("Ledger store initialised with %s entries", len(self._entries))

    def _seed_demo_entries(self) -> None:
        """Populate the store with deterministic demo data."""

        demo_drafts = [
            LedgerEntryDraft(
                transaction_type=TransactionType.INCOME,
                category="Milk Sales",
                amount=18500,
                transaction_date=date(2024, 5, 28),
                buyer_name="Kiambu Dairy Cooperative",
            ),
            LedgerEntryDraft(
                transaction_type=TransactionType.EXPENSE,
                category="Veterinary Services",
                amount=2500,
                transaction_date=date(2024, 5, 20),
                supplier_name="Limuru Vet Clinic",
            ),
            LedgerEntryDraft(
                transaction_type=TransactionType.EXPENSE,
                category="Labor",
                amount=9000,
                transaction_date=date(2024, 5, 31),
                description="Milker wages, May",
            ),
        ]
        for draft in demo_drafts:
            self.create(draft, owner_id=DEMO_OWNER_ID)

    def _next_id(self) -> str:
        """Generate a deterministic entry identifier."""

        self._sequence += 1
        return f"fin_{self._sequence:04d}"

    def _touch(self, entry_id: str) -> None:
        self._writes += 1
        self._write_order[entry_id] = self._writes

    def _register(self, entry: LedgerEntry) -> None:
        """Store an entry ensuring identifiers and links remain unique."""

        if entry.entry_id in self._entries:
            raise ValidationError(f"Ledger entry {entry.entry_id} already exists.")
        link = entry.link
        if link and (entry.owner_id, *link) in self._links:
            raise DuplicateLinkError(*link)
        self._entries[entry.entry_id] = entry
        if link:
            self._links[(entry.owner_id, *link)] = entry.entry_id
        self._touch(entry.entry_id)
        suffix = entry.entry_id.split("_")[-1]
        if suffix.isdigit():
            self._sequence = max(self._sequence, int(suffix))

    def _owned(self, entry_id: str, owner_id: str) -> LedgerEntry:
        entry = self._entries.get(entry_id)
        if entry is None or entry.owner_id != owner_id:
            raise NotFoundError(f"Ledger entry {entry_id} not found")
        return entry

    def find_by_description(self, description: str, *, owner_id: str) -> Optional[LedgerEntry]:
        owner_id = _require_owner(owner_id)
        with self._lock:
            matches = [
                entry
                for entry in self._entries.values()
                if entry.owner_id == owner_id and entry.description == description
            ]
            if not matches:
                LOGGER.debug("No ledger entry with description %s", description)
                return None
            if len(matches) > 1:
                LOGGER.warning(
                    "Found %s ledger entries with description %s; using the latest write",
                    len(matches),
                    description,
                )
            return max(matches, key=lambda entry: self._write_order[entry.entry_id])

    def find_by_source(
        self, record_type: str, record_id: str, *, owner_id: str
    ) -> Optional[LedgerEntry]:
        owner_id = _require_owner(owner_id)
        with self._lock:
            entry_id = self._links.get((owner_id, record_type, record_id))
            return self._entries.get(entry_id) if entry_id else None

    def create(self, draft: LedgerEntryDraft, *, owner_id: str) -> LedgerEntry:
        owner_id = _require_owner(owner_id)
        if draft.transaction_type is None:
            raise ValidationError("Transaction type is required")
        if draft.transaction_date is None:
            raise ValidationError("Transaction date is required")
        if bool(draft.source_record_type) != bool(draft.source_record_id):
            raise ValidationError("Source record type and id must be supplied together")
        values = _coerce_fields(
            {
                "transaction_type": draft.transaction_type,
                "category": draft.category,
                "amount": draft.amount,
                "transaction_date": draft.transaction_date,
            }
        )
        optional = {name: getattr(draft, name) for name in _OPTIONAL_TEXT_FIELDS}
        with self._lock:
            now = _utcnow()
            entry = LedgerEntry(
                entry_id=self._next_id(),
                owner_id=owner_id,
                created_at=now,
                updated_at=now,
                **values,
                **optional,
            )
            self._register(entry)
        LOGGER.info(
            "Created %s entry %s (%s, %s)",
            entry.transaction_type.value,
            entry.entry_id,
            entry.category,
            entry.amount,
        )
        return entry

    def update(self, entry_id: str, updates: Dict[str, object], *, owner_id: str) -> LedgerEntry:
        owner_id = _require_owner(owner_id)
        coerced = _coerce_fields(updates)
        with self._lock:
            current = self._owned(entry_id, owner_id)
            updated = replace(current, updated_at=_utcnow(), **coerced)
            if bool(updated.source_record_type) != bool(updated.source_record_id):
                raise ValidationError("Source record type and id must be supplied together")
            old_link, new_link = current.link, updated.link
            if new_link != old_link:
                if new_link and (owner_id, *new_link) in self._links:
                    raise DuplicateLinkError(*new_link)
                if old_link:
                    del self._links[(owner_id, *old_link)]
                if new_link:
                    self._links[(owner_id, *new_link)] = entry_id
            self._entries[entry_id] = updated
            self._touch(entry_id)
        LOGGER.info("Updated ledger entry %s fields=%s", entry_id, sorted(coerced))
        return updated

    def delete(self, entry_id: str, *, owner_id: str) -> None:
        owner_id = _require_owner(owner_id)
        with self._lock:
            entry = self._owned(entry_id, owner_id)
            if entry.link:
                del self._links[(owner_id, *entry.link)]
            del self._entries[entry_id]
            del self._write_order[entry_id]
        LOGGER.info("Deleted ledger entry %s", entry_id)

    def get(self, entry_id: str, *, owner_id: str) -> LedgerEntry:
        owner_id = _require_owner(owner_id)
        with self._lock:
            return self._owned(entry_id, owner_id)

    def list_entries(
        self,
        owner_id: str,
        *,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        animal_id: Optional[str] = None,
    ) -> List[LedgerEntry]:
        owner_id = _require_owner(owner_id)
        with self._lock:
            selected = [
                entry
                for entry in self._entries.values()
                if entry.owner_id == owner_id
                and (transaction_type is None or entry.transaction_type is transaction_type)
                and (category is None or entry.category.lower() == category.lower())
                and (animal_id is None or entry.animal_id == animal_id)
            ]
        return sorted(
            selected,
            key=lambda entry: (entry.transaction_date, entry.entry_id),
            reverse=True,
        )


__all__ = [
    "DEMO_OWNER_ID",
    "InMemoryLedgerStore",
    "LedgerEntry",
    "LedgerEntryDraft",
    "LedgerStore",
    "TransactionType",
    "parse_amount",
    "parse_date",
]
