"""Mini README: Feeding, breeding and production record workflows.

Structure:
    * FeedingWorkflow - feed cost becomes a "Feed" expense.
    * BreedingWorkflow - service cost becomes a "Breeding" expense.
    * ProductionWorkflow - milk sold (total yield x price per litre) becomes
      "Milk Sales" income.

All three hand a ``CostBearingRecord`` to the same ledger sync, so every
record type keeps at most one linked entry that follows later edits.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..errors import ValidationError
from ..finance.sync import (
    BREEDING_RECORD,
    FEEDING_RECORD,
    PRODUCTION_RECORD,
    CostBearingRecord,
)
from .base import RecordWorkflow, cost_field, date_field, quantity_field, text_field
from .models import BreedingRecord, DomainRecord, FeedingRecord, ProductionRecord
from .registry import REGISTRY


class FeedingWorkflow(RecordWorkflow):
    record_type = FEEDING_RECORD
    slug = "feeding"
    id_prefix = "feed"
    label = "Feeding record"

    def build_record(
        self,
        payload: Mapping[str, object],
        *,
        record_id: str,
        owner_id: str,
        existing: Optional[DomainRecord],
    ) -> FeedingRecord:
        return FeedingRecord(
            record_id=record_id,
            owner_id=owner_id,
            animal_id=self._animal_id(payload, existing),
            date=date_field(payload, "date", required=True),
            feed_type=text_field(payload, "feed_type", required=True),
            quantity=quantity_field(payload, "quantity"),
            source_of_feed=text_field(payload, "source_of_feed"),
            cost=cost_field(payload),
            notes=text_field(payload, "notes"),
            **self._audit_fields(existing),
        )

    def to_cost_bearing(self, record: FeedingRecord) -> CostBearingRecord:
        return CostBearingRecord(
            record_type=self.record_type,
            record_id=record.record_id,
            animal_id=record.animal_id,
            amount=record.cost,
            date=record.date,
        )


class BreedingWorkflow(RecordWorkflow):
    record_type = BREEDING_RECORD
    slug = "breeding"
    id_prefix = "breed"
    label = "Breeding record"

    _DATE_FIELDS = (
        "date_of_heat",
        "date_served",
        "pregnancy_confirmation_date",
        "expected_calving_date",
        "actual_calving_date",
        "steaming_date",
        "observation_date",
    )
    _TEXT_FIELDS = ("mating_method", "bull_ai_source", "conception_status", "notes")

    def build_record(
        self,
        payload: Mapping[str, object],
        *,
        record_id: str,
        owner_id: str,
        existing: Optional[DomainRecord],
    ) -> BreedingRecord:
        dates = {name: date_field(payload, name) for name in self._DATE_FIELDS}
        if dates["date_of_heat"] is None and dates["date_served"] is None:
            raise ValidationError("Either 'date_of_heat' or 'date_served' is required")
        texts = {name: text_field(payload, name) for name in self._TEXT_FIELDS}
        return BreedingRecord(
            record_id=record_id,
            owner_id=owner_id,
            animal_id=self._animal_id(payload, existing),
            cost=cost_field(payload),
            **dates,
            **texts,
            **self._audit_fields(existing),
        )

    def to_cost_bearing(self, record: BreedingRecord) -> CostBearingRecord:
        return CostBearingRecord(
            record_type=self.record_type,
            record_id=record.record_id,
            animal_id=record.animal_id,
            amount=record.cost,
            date=record.record_date,
        )


class ProductionWorkflow(RecordWorkflow):
    record_type = PRODUCTION_RECORD
    slug = "production"
    id_prefix = "prod"
    label = "Production record"

    def build_record(
        self,
        payload: Mapping[str, object],
        *,
        record_id: str,
        owner_id: str,
        existing: Optional[DomainRecord],
    ) -> ProductionRecord:
        return ProductionRecord(
            record_id=record_id,
            owner_id=owner_id,
            animal_id=self._animal_id(payload, existing),
            date=date_field(payload, "date", required=True),
            am_yield=quantity_field(payload, "am_yield"),
            noon_yield=quantity_field(payload, "noon_yield"),
            pm_yield=quantity_field(payload, "pm_yield"),
            price_per_litre=quantity_field(payload, "price_per_litre"),
            use_type=text_field(payload, "use_type"),
            notes=text_field(payload, "notes"),
            **self._audit_fields(existing),
        )

    def to_cost_bearing(self, record: ProductionRecord) -> CostBearingRecord:
        return CostBearingRecord(
            record_type=self.record_type,
            record_id=record.record_id,
            animal_id=record.animal_id,
            amount=record.sale_amount,
            date=record.date,
        )


REGISTRY.register(FeedingWorkflow)
REGISTRY.register(BreedingWorkflow)
REGISTRY.register(ProductionWorkflow)
