"""Mini README: In-memory persistence for herd records.

Structure:
    * RecordStore - owner-scoped upsert, lookup, soft delete and listing.

Records are keyed by ``(owner_id, record_type, record_id)`` so two farms can
reuse the same identifiers without colliding. Deleting only stamps
``deleted_at``; listings hide deleted rows.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..errors import NotFoundError
from ..logging_utils import get_logger
from .models import DomainRecord

LOGGER = get_logger(__name__)


class RecordStore:
    """Hold domain records for every record type behind a lock."""

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str, str], DomainRecord] = {}
        self._sequences: Dict[str, int] = {}
        self._lock = threading.RLock()

    def next_id(self, prefix: str) -> str:
        """Generate a deterministic identifier such as ``feed_0001``."""

        with self._lock:
            self._sequences[prefix] = self._sequences.get(prefix, 0) + 1
            return f"{prefix}_{self._sequences[prefix]:04d}"

    def find(
        self,
        record_type: str,
        record_id: str,
        *,
        owner_id: str,
        include_deleted: bool = False,
    ) -> Optional[DomainRecord]:
        """Return a record or ``None``; soft-deleted rows only when asked for."""

        with self._lock:
            record = self._records.get((owner_id, record_type, record_id))
        if record is None or (record.is_deleted and not include_deleted):
            return None
        return record

    def get(self, record_type: str, record_id: str, *, owner_id: str) -> DomainRecord:
        """Return a live record, raising ``NotFoundError`` when missing."""

        record = self.find(record_type, record_id, owner_id=owner_id)
        if record is None:
            raise NotFoundError(f"{record_type} {record_id} not found")
        return record

    def save(self, record: DomainRecord) -> DomainRecord:
        """Insert or replace a record. Soft-deleted rows are never replaced."""

        key = (record.owner_id, record.record_type, record.record_id)
        with self._lock:
            current = self._records.get(key)
            if current is not None and current.is_deleted:
                raise NotFoundError(f"{record.record_type} {record.record_id} was deleted")
            created = current is None
            self._records[key] = record
        LOGGER.debug("%s %s %s", "Inserted" if created else "Replaced", record.record_type, record.record_id)
        return record

    def soft_delete(self, record_type: str, record_id: str, *, owner_id: str) -> DomainRecord:
        """Stamp ``deleted_at`` on a live record and return the stamped copy."""

        with self._lock:
            record = self.get(record_type, record_id, owner_id=owner_id)
            now = datetime.now(timezone.utc)
            deleted = replace(record, deleted_at=now, updated_at=now)
            self._records[(owner_id, record_type, record_id)] = deleted
        LOGGER.info("Soft deleted %s %s", record_type, record_id)
        return deleted

    def list_records(
        self,
        record_type: str,
        owner_id: str,
        *,
        animal_id: Optional[str] = None,
    ) -> List[DomainRecord]:
        """Return live records of one type, newest record date first."""

        with self._lock:
            selected = [
                record
                for (owner, kind, _), record in self._records.items()
                if owner == owner_id
                and kind == record_type
                and not record.is_deleted
                and (animal_id is None or record.animal_id == animal_id)
            ]
        return sorted(
            selected,
            key=lambda record: (record.record_date or date.min, record.created_at),
            reverse=True,
        )
