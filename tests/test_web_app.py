"""Mini README: HTTP tests for the FastAPI service.

Drives form submissions through ``TestClient`` and checks status codes, the
ledger sync outcome carried in responses and the finance views.
"""

from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from dairyledger.errors import BackendUnavailableError
from dairyledger.finance import InMemoryLedgerStore, LedgerEntry
from dairyledger.interface import create_application

HEADERS = {"X-Owner-Id": "farm-a"}


class OfflineLedgerStore(InMemoryLedgerStore):
    def find_by_source(self, record_type: str, record_id: str, *, owner_id: str) -> Optional[LedgerEntry]:
        raise BackendUnavailableError("ledger service unreachable")

    def list_entries(self, owner_id: str, **filters: object) -> list:
        raise BackendUnavailableError("ledger service unreachable")


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_application(ledger_store=InMemoryLedgerStore()))


def test_index_lists_record_types(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["record_types"] == ["breeding", "feeding", "production"]


def test_feeding_submission_creates_and_updates_entry(client: TestClient) -> None:
    form = {"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Dairy meal", "cost": "1500"}

    created = client.post("/records/feeding/f1", data=form, headers=HEADERS)
    updated = client.post("/records/feeding/f1", data={**form, "cost": "2000"}, headers=HEADERS)

    assert created.status_code == 201
    assert updated.status_code == 200
    assert created.json()["created"] is True
    assert updated.json()["created"] is False
    assert created.json()["ledger"]["outcome"] == "created"
    assert updated.json()["ledger"]["outcome"] == "updated"
    entries = client.get("/finance/entries", headers=HEADERS).json()["entries"]
    assert len(entries) == 1
    assert entries[0]["amount"] == 2000
    assert entries[0]["description"] == "FeedingRecord:f1"


def test_new_record_gets_generated_id(client: TestClient) -> None:
    response = client.post(
        "/records/breeding",
        data={"animal_id": "cow-7", "date_served": "2024-04-03", "cost": "3000"},
        headers=HEADERS,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["record"]["record_id"] == "breed_0001"
    assert body["ledger"]["entry"]["category"] == "Breeding"


def test_missing_owner_header_is_unauthorised(client: TestClient) -> None:
    response = client.post("/records/feeding", data={"animal_id": "cow-7"})

    assert response.status_code == 401


def test_invalid_submission_returns_422(client: TestClient) -> None:
    response = client.post("/records/feeding", data={"animal_id": "cow-7"}, headers=HEADERS)

    assert response.status_code == 422
    assert client.get("/records/feeding", headers=HEADERS).json()["records"] == []


def test_rejected_submission_does_not_spend_generated_id(client: TestClient) -> None:
    client.post("/records/feeding", data={"animal_id": "cow-7"}, headers=HEADERS)

    response = client.post(
        "/records/feeding",
        data={"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Hay"},
        headers=HEADERS,
    )

    assert response.json()["record"]["record_id"] == "feed_0001"


def test_resaving_deleted_record_returns_404(client: TestClient) -> None:
    form = {"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Hay", "cost": "700"}
    client.post("/records/feeding/f1", data=form, headers=HEADERS)
    client.delete("/records/feeding/f1", headers=HEADERS)

    response = client.post("/records/feeding/f1", data={**form, "feed_type": "Silage"}, headers=HEADERS)

    assert response.status_code == 404
    assert client.get("/finance/entries", headers=HEADERS).json()["entries"] == []


def test_unknown_record_type_returns_404(client: TestClient) -> None:
    response = client.get("/records/health", headers=HEADERS)

    assert response.status_code == 404


def test_delete_record_retracts_entry(client: TestClient) -> None:
    form = {"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Hay", "cost": "700"}
    client.post("/records/feeding/f1", data=form, headers=HEADERS)

    response = client.delete("/records/feeding/f1", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["ledger"]["outcome"] == "retracted"
    assert client.get("/finance/entries", headers=HEADERS).json()["entries"] == []
    assert client.delete("/records/feeding/f1", headers=HEADERS).status_code == 404


def test_summary_and_filters(client: TestClient) -> None:
    client.post(
        "/records/production/p1",
        data={"animal_id": "cow-7", "date": "2024-05-01", "am_yield": "10", "price_per_litre": "50", "use_type": "Sold"},
        headers=HEADERS,
    )
    client.post(
        "/records/feeding/f1",
        data={"animal_id": "cow-8", "date": "2024-05-01", "feed_type": "Hay", "cost": "200"},
        headers=HEADERS,
    )

    summary = client.get("/finance/summary", headers=HEADERS).json()
    assert summary["total_income"] == 500
    assert summary["total_expenses"] == 200
    assert summary["balance"] == 300
    assert summary["currency"] == "KSh"

    income = client.get("/finance/entries", params={"transaction_type": "income"}, headers=HEADERS).json()
    assert [entry["category"] for entry in income["entries"]] == ["Milk Sales"]
    by_animal = client.get("/finance/entries", params={"animal_id": "cow-8"}, headers=HEADERS).json()
    assert [entry["category"] for entry in by_animal["entries"]] == ["Feed"]
    snapshot = client.get("/finance/snapshot", headers=HEADERS).json()
    assert len(snapshot["income"]) == 1 and len(snapshot["expenses"]) == 1
    assert client.get("/finance/entries", params={"transaction_type": "gift"}, headers=HEADERS).status_code == 422


def test_delete_entry(client: TestClient) -> None:
    client.post(
        "/records/feeding/f1",
        data={"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Hay", "cost": "200"},
        headers=HEADERS,
    )
    entry_id = client.get("/finance/entries", headers=HEADERS).json()["entries"][0]["entry_id"]

    assert client.delete(f"/finance/entries/{entry_id}", headers=HEADERS).status_code == 200
    assert client.delete(f"/finance/entries/{entry_id}", headers=HEADERS).status_code == 404


def test_ledger_outage_still_saves_record() -> None:
    client = TestClient(create_application(ledger_store=OfflineLedgerStore()))

    response = client.post(
        "/records/feeding/f1",
        data={"animal_id": "cow-7", "date": "2024-05-01", "feed_type": "Hay", "cost": "200"},
        headers=HEADERS,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["ledger"] is None
    assert body["notifications"]
    assert client.get("/records/feeding", headers=HEADERS).json()["records"][0]["record_id"] == "f1"
    assert client.get("/finance/entries", headers=HEADERS).status_code == 503


def test_manual_entry_create_and_edit(client: TestClient) -> None:
    """Finance form entries carry buyer and supplier details."""

    created = client.post(
        "/finance/entries",
        data={
            "transaction_type": "Expense",
            "category": "Labor",
            "amount": "900",
            "transaction_date": "2024-05-31",
            "supplier_name": "Wanjiru Casuals",
            "supplier_contact": "0712 000 000",
            "description": "",
        },
        headers=HEADERS,
    )

    assert created.status_code == 201
    entry = created.json()
    assert entry["amount"] == 900
    assert entry["supplier_name"] == "Wanjiru Casuals"
    assert entry["description"] is None
    assert entry["source_record_type"] is None

    edited = client.post(
        f"/finance/entries/{entry['entry_id']}",
        data={"amount": "1250.5", "receipt_photo_url": "https://example.com/r/1.jpg"},
        headers=HEADERS,
    )

    assert edited.status_code == 200
    assert edited.json()["amount"] == 1251
    assert edited.json()["category"] == "Labor"
    assert edited.json()["receipt_photo_url"] == "https://example.com/r/1.jpg"
    summary = client.get("/finance/summary", headers=HEADERS).json()
    assert summary["total_expenses"] == 1251


@pytest.mark.parametrize("amount", ["0", "-40", ""])
def test_manual_entry_rejects_non_positive_amount(client: TestClient, amount: str) -> None:
    response = client.post(
        "/finance/entries",
        data={"transaction_type": "Income", "category": "Milk Sales", "amount": amount, "transaction_date": "2024-05-31"},
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert client.get("/finance/entries", headers=HEADERS).json()["entries"] == []


def test_manual_entry_edit_unknown_or_foreign_entry_returns_404(client: TestClient) -> None:
    created = client.post(
        "/finance/entries",
        data={"transaction_type": "Income", "category": "Milk Sales", "amount": "500", "transaction_date": "2024-05-31"},
        headers=HEADERS,
    ).json()

    missing = client.post("/finance/entries/fin_9999", data={"amount": "10"}, headers=HEADERS)
    foreign = client.post(
        f"/finance/entries/{created['entry_id']}", data={"amount": "10"}, headers={"X-Owner-Id": "farm-b"}
    )

    assert missing.status_code == 404
    assert foreign.status_code == 404


def test_manual_entry_requires_owner(client: TestClient) -> None:
    response = client.post("/finance/entries", data={"category": "Labor"})

    assert response.status_code == 401
