"""Tests for the chart of accounts endpoints."""

from decimal import Decimal

from charter_ledger.services.default_chart import DEFAULT_CHART


def test_seed_twice(client):
    first = client.post("/accounts/seed").json()
    second = client.post("/accounts/seed").json()

    assert first == {"created": len(DEFAULT_CHART), "skipped": 0}
    assert second == {"created": 0, "skipped": len(DEFAULT_CHART)}


def test_create_account(client):
    response = client.post("/accounts", json={
        "code": "4400", "name": "Brokerage Commission", "account_type": "Revenue",
    })

    assert response.status_code == 201
    assert response.json()["normal_balance"] == "Credit"


def test_create_duplicate_account(seeded_client):
    response = seeded_client.post("/accounts", json={
        "code": "1010", "name": "Duplicate", "account_type": "Asset",
    })
    assert response.status_code == 400


def test_get_missing_account(client):
    assert client.get("/accounts/9999").status_code == 404


def test_list_by_type(seeded_client):
    accounts = seeded_client.get("/accounts", params={"account_type": "Equity"}).json()
    assert [a["code"] for a in accounts] == ["3000", "3200"]


def test_deactivated_account_hidden_and_unusable(seeded_client):
    seeded_client.post("/accounts/6100/deactivate")

    active = {a["code"] for a in seeded_client.get("/accounts").json()}
    assert "6100" not in active

    response = seeded_client.post("/journal-entries", headers={"X-User": "alice"}, json={
        "company_id": "co-1",
        "entry_date": "2025-03-01",
        "description": "Rent",
        "lines": [
            {"account_code": "6100", "entry_type": "debit", "amount": "100.00"},
            {"account_code": "1010", "entry_type": "credit", "amount": "100.00"},
        ],
    })
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_ENTRY"


def test_balance_from_posted_entries(seeded_client):
    created = seeded_client.post("/journal-entries", headers={"X-User": "alice"}, json={
        "company_id": "co-1",
        "entry_date": "2025-03-01",
        "description": "Owner capital",
        "lines": [
            {"account_code": "1010", "entry_type": "debit", "amount": "5000.00"},
            {"account_code": "3000", "entry_type": "credit", "amount": "5000.00"},
        ],
    }).json()
    seeded_client.post(
        f"/journal-entries/{created['journal_entry_id']}/post", headers={"X-User": "alice"}
    )

    data = seeded_client.get("/accounts/3000/balance", params={"company_id": "co-1"}).json()
    assert Decimal(data["balance"]) == Decimal("5000.00")
    assert Decimal(data["total_debit"]) == Decimal("0")
