"""Mini README: FastAPI service for herd records and the farm ledger.

Structure:
    * create_application - application factory wiring stores and routes.
    * Record routes - form submissions for feeding, breeding and production.
    * Finance routes - ledger listing, summary cards and manual entry
      create, edit and delete.

Callers are identified by the ``X-Owner-Id`` header set by the hosting
application's authentication layer. Record saves return the stored record,
the ledger sync outcome and any notifications. New records answer 201 and
edits 200; a failed ledger sync does not change either because the record
itself was saved.
"""

from __future__ import annotations

from typing import Dict, Mapping, NoReturn, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from ..configuration import get_settings
from ..errors import (
    AuthenticationError,
    BackendUnavailableError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from ..finance import (
    InMemoryLedgerStore,
    LedgerEntryDraft,
    LedgerStore,
    LedgerSync,
    TransactionType,
)
from ..logging_utils import configure_root_logger, get_logger
from ..records import REGISTRY, RecordStore, RecordWorkflow

LOGGER = get_logger(__name__)

_STATUS_CODES = {
    ValidationError: 422,
    AuthenticationError: 401,
    NotFoundError: 404,
    BackendUnavailableError: 503,
}


def _raise_http(error: LedgerError) -> NoReturn:
    """Translate a domain error into the matching HTTP error."""

    for error_cls, status_code in _STATUS_CODES.items():
        if isinstance(error, error_cls):
            raise HTTPException(status_code=status_code, detail=str(error)) from error
    raise HTTPException(status_code=500, detail=str(error)) from error


def _require_owner(owner_id: Optional[str]) -> str:
    if not owner_id or not owner_id.strip():
        raise HTTPException(status_code=401, detail="X-Owner-Id header is required")
    return owner_id.strip()


_ENTRY_FORM_FIELDS = (
    "transaction_type",
    "category",
    "amount",
    "transaction_date",
    "animal_id",
    "description",
    "buyer_name",
    "buyer_contact",
    "supplier_name",
    "supplier_contact",
    "receipt_photo_url",
)


def _entry_fields(form: Mapping[str, object]) -> Dict[str, Optional[str]]:
    """Collect submitted ledger entry fields; blank values become ``None``."""

    values: Dict[str, Optional[str]] = {}
    for name in _ENTRY_FORM_FIELDS:
        value = form.get(name)
        if isinstance(value, str):
            values[name] = value.strip() or None
    return values


def create_application(
    ledger_store: Optional[LedgerStore] = None,
    record_store: Optional[RecordStore] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    app = FastAPI(title="Dairy Ledger", version="0.1.0")

    ledger = ledger_store or InMemoryLedgerStore(seed_demo=settings.seed_demo_data)
    records = record_store or RecordStore()
    sync = LedgerSync(ledger)
    workflows: Dict[str, RecordWorkflow] = {
        slug: REGISTRY.create(slug, records=records, sync=sync)
        for slug in REGISTRY.available_workflows()
    }

    def workflow_for(slug: str) -> RecordWorkflow:
        workflow = workflows.get(slug.lower())
        if workflow is None:
            raise HTTPException(status_code=404, detail=f"Unknown record type '{slug}'")
        return workflow

    @app.get("/")
    async def index() -> JSONResponse:
        """Confirm the service is running and list record types."""

        return JSONResponse(
            {
                "service": "Dairy Ledger",
                "environment": settings.environment,
                "record_types": list(workflows),
            }
        )

    @app.post("/records/{slug}")
    @app.post("/records/{slug}/{record_id}")
    async def save_record(
        slug: str,
        request: Request,
        record_id: Optional[str] = None,
        x_owner_id: Optional[str] = Header(None),
    ) -> JSONResponse:
        """Create or update a record from a form submission."""

        owner_id = _require_owner(x_owner_id)
        workflow = workflow_for(slug)
        form = await request.form()
        payload = {key: value for key, value in form.items() if isinstance(value, str)}
        try:
            result = workflow.save(payload, owner_id=owner_id, record_id=record_id)
        except LedgerError as error:
            _raise_http(error)
        for notice in result.notifications:
            LOGGER.warning("Notification for owner %s: %s", owner_id, notice)
        return JSONResponse(result.as_dict(), status_code=201 if result.created else 200)

    @app.delete("/records/{slug}/{record_id}")
    async def delete_record(
        slug: str,
        record_id: str,
        x_owner_id: Optional[str] = Header(None),
    ) -> JSONResponse:
        """Soft delete a record and retract its ledger entry."""

        owner_id = _require_owner(x_owner_id)
        workflow = workflow_for(slug)
        try:
            result = workflow.delete(record_id, owner_id=owner_id)
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse(result.as_dict())

    @app.get("/records/{slug}")
    async def list_records(
        slug: str,
        animal_id: Optional[str] = None,
        x_owner_id: Optional[str] = Header(None),
    ) -> JSONResponse:
        """Return live records of one type, newest first."""

        owner_id = _require_owner(x_owner_id)
        workflow = workflow_for(slug)
        found = workflow.list_records(owner_id, animal_id=animal_id)
        LOGGER.debug("Returning %s %s records", len(found), slug)
        return JSONResponse({"records": [record.as_dict() for record in found]})

    @app.get("/finance/entries")
    async def list_entries(
        transaction_type: Optional[str] = None,
        category: Optional[str] = None,
        animal_id: Optional[str] = None,
        x_owner_id: Optional[str] = Header(None),
    ) -> JSONResponse:
        """Return ledger entries, optionally filtered."""

        owner_id = _require_owner(x_owner_id)
        try:
            kind = TransactionType.from_str(transaction_type) if transaction_type else None
            entries = ledger.list_entries(
                owner_id, transaction_type=kind, category=category, animal_id=animal_id
            )
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse({"entries": [entry.as_dict() for entry in entries]})

    @app.get("/finance/summary")
    async def finance_summary(x_owner_id: Optional[str] = Header(None)) -> JSONResponse:
        """Return income, expense and balance totals."""

        owner_id = _require_owner(x_owner_id)
        try:
            summary = ledger.summarise(owner_id)
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse({**summary, "currency": settings.currency_label})

    @app.get("/finance/snapshot")
    async def finance_snapshot(x_owner_id: Optional[str] = Header(None)) -> JSONResponse:
        """Return entries grouped into income and expenses."""

        owner_id = _require_owner(x_owner_id)
        try:
            snapshot = ledger.export_snapshot(owner_id)
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse(snapshot)

    @app.post("/finance/entries")
    async def create_entry(request: Request, x_owner_id: Optional[str] = Header(None)) -> JSONResponse:
        """Record a manual income or expense entry from the finance form."""

        owner_id = _require_owner(x_owner_id)
        values = _entry_fields(await request.form())
        draft = LedgerEntryDraft(
            transaction_type=values.pop("transaction_type", None),
            category=values.pop("category", None),
            amount=values.pop("amount", None),
            transaction_date=values.pop("transaction_date", None),
            **values,
        )
        try:
            entry = ledger.create(draft, owner_id=owner_id)
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse(entry.as_dict(), status_code=201)

    @app.post("/finance/entries/{entry_id}")
    async def update_entry(
        entry_id: str,
        request: Request,
        x_owner_id: Optional[str] = Header(None),
    ) -> JSONResponse:
        """Edit the submitted fields of an existing ledger entry."""

        owner_id = _require_owner(x_owner_id)
        updates = _entry_fields(await request.form())
        try:
            entry = ledger.update(entry_id, updates, owner_id=owner_id)
        except LedgerError as error:
            _raise_http(error)
        return JSONResponse(entry.as_dict())

    @app.delete("/finance/entries/{entry_id}")
    async def delete_entry(entry_id: str, x_owner_id: Optional[str] = Header(None)) -> JSONResponse:
        """Delete a ledger entry."""

        owner_id = _require_owner(x_owner_id)
        try:
            ledger.delete(entry_id, owner_id=owner_id)
        except LedgerError as error:
            _raise_http(error)
        LOGGER.info("Owner %s deleted ledger entry %s", owner_id, entry_id)
        return JSONResponse({"deleted": entry_id})

    return app
