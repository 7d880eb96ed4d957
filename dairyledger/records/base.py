"""Mini README: Shared save/delete flow for cost-bearing herd records.

Structure:
    * SaveResult - the stored record, the ledger sync outcome and any notices.
    * RecordWorkflow - abstract validate -> persist -> sync workflow.
    * Field helpers - parse form payload values into typed record fields.

Each concrete workflow only knows how to build its record from a payload and
how to describe the record's money as a ``CostBearingRecord``. Persisting the
record and syncing the ledger are separate steps: a failed sync is logged
and reported in ``SaveResult.notifications`` while the saved record stays.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional

from ..errors import AuthenticationError, LedgerError, NotFoundError, ValidationError
from ..finance.ledger import parse_amount, parse_date
from ..finance.sync import CostBearingRecord, LedgerSync, SyncResult
from ..logging_utils import get_logger
from .models import DomainRecord
from .store import RecordStore

LOGGER = get_logger(__name__)


def text_field(payload: Mapping[str, object], name: str, *, required: bool = False) -> Optional[str]:
    """Return a stripped string, ``None`` for blanks, or fail when required."""

    value = payload.get(name)
    text = str(value).strip() if value is not None else ""
    if not text:
        if required:
            raise ValidationError(f"Field '{name}' is required")
        return None
    return text


def date_field(payload: Mapping[str, object], name: str, *, required: bool = False) -> Optional[date]:
    value = payload.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"Field '{name}' is required")
        return None
    return parse_date(value)


def quantity_field(payload: Mapping[str, object], name: str) -> Optional[float]:
    """Parse an optional non-negative measurement such as litres or kilograms."""

    value = payload.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as error:
        raise ValidationError(f"Field '{name}' must be a number") from error
    if not math.isfinite(number):
        raise ValidationError(f"Field '{name}' must be a finite number")
    if number < 0:
        raise ValidationError(f"Field '{name}' cannot be negative")
    return number


def cost_field(payload: Mapping[str, object], name: str = "cost") -> Optional[int]:
    cost = parse_amount(payload.get(name))
    if cost is not None and cost < 0:
        raise ValidationError(f"Field '{name}' cannot be negative")
    return cost


@dataclass(slots=True)
class SaveResult:
    """Outcome of a workflow run."""

    record: DomainRecord
    sync: Optional[SyncResult] = None
    notifications: List[str] = field(default_factory=list)
    created: bool = False

    @property
    def synced(self) -> bool:
        return self.sync is not None

    def as_dict(self) -> Dict[str, object]:
        return {
            "record": self.record.as_dict(),
            "ledger": self.sync.as_dict() if self.sync else None,
            "notifications": list(self.notifications),
            "created": self.created,
        }


class RecordWorkflow(ABC):
    """Base workflow: validate the payload, persist the record, sync the ledger."""

    record_type: str = "DomainRecord"
    slug: str = "generic"
    id_prefix: str = "rec"
    label: str = "Record"

    def __init__(self, records: RecordStore, sync: LedgerSync) -> None:
        self.records = records
        self.sync = sync

    @abstractmethod
    def build_record(
        self,
        payload: Mapping[str, object],
        *,
        record_id: str,
        owner_id: str,
        existing: Optional[DomainRecord],
    ) -> DomainRecord:
        """Validate ``payload`` and return the record to persist."""

    @abstractmethod
    def to_cost_bearing(self, record: DomainRecord) -> CostBearingRecord:
        """Describe the money carried by ``record`` for the ledger sync."""

    def save(
        self,
        payload: Mapping[str, object],
        *,
        owner_id: str,
        record_id: Optional[str] = None,
    ) -> SaveResult:
        """Create or update a record, then sync its ledger entry."""

        if not owner_id:
            raise AuthenticationError("An authenticated owner is required")
        existing = None
        if record_id:
            existing = self.records.find(
                self.record_type, record_id, owner_id=owner_id, include_deleted=True
            )
            if existing is not None and existing.is_deleted:
                raise NotFoundError(f"{self.record_type} {record_id} was deleted")
        record = self.build_record(
            payload,
            record_id=record_id or "",
            owner_id=owner_id,
            existing=existing,
        )
        if not record_id:
            # Sequence numbers are only spent on payloads that validated.
            record = replace(record, record_id=self.records.next_id(self.id_prefix))
        self.records.save(record)
        LOGGER.info(
            "%s %s %s for animal %s",
            "Updated" if existing else "Created",
            self.record_type,
            record.record_id,
            record.animal_id,
        )
        result = self._run_sync(
            record, lambda: self.sync.sync(self.to_cost_bearing(record), owner_id=owner_id)
        )
        result.created = existing is None
        return result

    def delete(self, record_id: str, *, owner_id: str) -> SaveResult:
        """Soft delete a record and retract its ledger entry."""

        if not owner_id:
            raise AuthenticationError("An authenticated owner is required")
        record = self.records.soft_delete(self.record_type, record_id, owner_id=owner_id)
        return self._run_sync(
            record, lambda: self.sync.retract(self.record_type, record_id, owner_id=owner_id)
        )

    def list_records(self, owner_id: str, *, animal_id: Optional[str] = None) -> List[DomainRecord]:
        return self.records.list_records(self.record_type, owner_id, animal_id=animal_id)

    def _animal_id(self, payload: Mapping[str, object], existing: Optional[DomainRecord]) -> str:
        animal_id = text_field(payload, "animal_id")
        if animal_id is None and existing is not None:
            return existing.animal_id
        if animal_id is None:
            raise ValidationError("Field 'animal_id' is required")
        return animal_id

    def _audit_fields(self, existing: Optional[DomainRecord]) -> Dict[str, datetime]:
        now = datetime.now(timezone.utc)
        return {"created_at": existing.created_at if existing else now, "updated_at": now}

    def _run_sync(self, record: DomainRecord, action: Callable[[], SyncResult]) -> SaveResult:
        try:
            outcome = action()
        except LedgerError as error:
            LOGGER.warning(
                "Ledger sync failed for %s %s: %s", self.record_type, record.record_id, error
            )
            return SaveResult(
                record,
                notifications=[f"{self.label} saved, but the finance record was not updated: {error}"],
            )
        except Exception as error:
            LOGGER.exception(
                "Unexpected ledger sync failure for %s %s", self.record_type, record.record_id
            )
            return SaveResult(
                record,
                notifications=[f"{self.label} saved, but the finance record was not updated: {error}"],
            )
        return SaveResult(record, outcome)
