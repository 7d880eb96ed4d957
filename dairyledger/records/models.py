"""Mini README: Herd activity records that may carry money.

Structure:
    * DomainRecord - fields shared by every record (owner, animal, audit dates).
    * FeedingRecord - feed given to an animal, with an optional cost.
    * BreedingRecord - heat, service and calving milestones, optional cost.
    * ProductionRecord - milk yields per session and an optional sale price.

Records are soft deleted: ``deleted_at`` is set and the row stays in the
store. ``record_date`` is the date a record is filed under; it drives list
ordering and the transaction date of any derived ledger entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import ClassVar, Dict, Optional

from ..finance.ledger import parse_amount
from ..finance.sync import BREEDING_RECORD, FEEDING_RECORD, PRODUCTION_RECORD

SOLD_USE_TYPE = "Sold"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialise(value: object) -> object:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


@dataclass(slots=True, kw_only=True)
class DomainRecord:
    """Fields common to every herd record."""

    record_type: ClassVar[str] = "DomainRecord"

    record_id: str
    owner_id: str
    animal_id: str
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def record_date(self) -> Optional[date]:
        return None

    def as_dict(self) -> Dict[str, object]:
        """Export the record with serialisable values."""

        payload = {item.name: _serialise(getattr(self, item.name)) for item in fields(self)}
        payload["record_type"] = self.record_type
        return payload


@dataclass(slots=True, kw_only=True)
class FeedingRecord(DomainRecord):
    """Feed ration given to one animal on one day."""

    record_type: ClassVar[str] = FEEDING_RECORD

    date: date
    feed_type: str
    quantity: Optional[float] = None
    source_of_feed: Optional[str] = None
    cost: Optional[int] = None

    @property
    def record_date(self) -> Optional[date]:
        return self.date


@dataclass(slots=True, kw_only=True)
class BreedingRecord(DomainRecord):
    """Breeding cycle milestones for one animal."""

    record_type: ClassVar[str] = BREEDING_RECORD

    date_of_heat: Optional[date] = None
    date_served: Optional[date] = None
    mating_method: Optional[str] = None
    bull_ai_source: Optional[str] = None
    conception_status: Optional[str] = None
    pregnancy_confirmation_date: Optional[date] = None
    expected_calving_date: Optional[date] = None
    actual_calving_date: Optional[date] = None
    steaming_date: Optional[date] = None
    observation_date: Optional[date] = None
    cost: Optional[int] = None

    @property
    def record_date(self) -> Optional[date]:
        """Service date when known, otherwise the heat date."""

        return self.date_served or self.date_of_heat


@dataclass(slots=True, kw_only=True)
class ProductionRecord(DomainRecord):
    """Milk yields for one animal on one day."""

    record_type: ClassVar[str] = PRODUCTION_RECORD

    date: date
    am_yield: Optional[float] = None
    noon_yield: Optional[float] = None
    pm_yield: Optional[float] = None
    price_per_litre: Optional[float] = None
    use_type: Optional[str] = None

    @property
    def record_date(self) -> Optional[date]:
        return self.date

    @property
    def total_yield(self) -> float:
        return (self.am_yield or 0.0) + (self.noon_yield or 0.0) + (self.pm_yield or 0.0)

    @property
    def sale_amount(self) -> Optional[int]:
        """Income from the day's milk when it was sold, in whole units."""

        if self.use_type != SOLD_USE_TYPE or not self.price_per_litre:
            return None
        return parse_amount(Decimal(str(self.total_yield)) * Decimal(str(self.price_per_litre)))

    def as_dict(self) -> Dict[str, object]:
        payload = DomainRecord.as_dict(self)
        payload["total_yield"] = self.total_yield
        payload["sale_amount"] = self.sale_amount
        return payload
