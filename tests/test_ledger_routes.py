"""HTTP tests for categories, transactions, budgets, reports and health."""

from fastapi.testclient import TestClient

from fintrack.main import create_app
from tests.fakes import BrokenFirestore


def _category(client, headers, name="Food", color="#f97316"):
    response = client.post("/categories", json={"name": name, "color": color}, headers=headers)
    assert response.status_code == 201
    return response.json()


def _transaction(client, headers, **fields):
    body = {"amount": 100, "type": "expense", "occurred_at": "2025-08-10", **fields}
    response = client.post("/transactions", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# CATEGORIES
# ============================================================================


def test_category_crud(client, alice):
    created = _category(client, alice, name="  Food  ")
    assert created["name"] == "Food"
    assert created["icon"] is None
    assert "user_id" not in created

    updated = client.patch(f"/categories/{created['id']}", json={"color": "#000000"}, headers=alice)
    assert updated.status_code == 200
    assert updated.json()["color"] == "#000000"
    assert updated.json()["name"] == "Food"

    assert [c["id"] for c in client.get("/categories", headers=alice).json()] == [created["id"]]

    assert client.delete(f"/categories/{created['id']}", headers=alice).status_code == 204
    assert client.get("/categories", headers=alice).json() == []


def test_categories_are_private(client, alice, bob):
    created = _category(client, alice)

    assert client.get("/categories", headers=bob).json() == []
    assert client.patch(f"/categories/{created['id']}", json={"name": "Mine"}, headers=bob).status_code == 404
    assert client.delete(f"/categories/{created['id']}", headers=bob).status_code == 404
    assert client.get("/categories", headers=alice).json()[0]["name"] == "Food"


def test_category_requires_color(client, alice):
    assert client.post("/categories", json={"name": "Food"}, headers=alice).status_code == 422


def test_missing_user_header_is_anonymous(client):
    _category(client, {})
    assert len(client.get("/categories", headers={"X-User-ID": "anon"}).json()) == 1


# ============================================================================
# TRANSACTIONS
# ============================================================================


def test_transaction_validation(client, alice):
    assert client.post("/transactions", json={
        "amount": 0, "type": "expense", "occurred_at": "2025-08-10",
    }, headers=alice).status_code == 422
    assert client.post("/transactions", json={
        "amount": 10, "type": "transfer", "occurred_at": "2025-08-10",
    }, headers=alice).status_code == 422
    assert client.post("/transactions", json={
        "amount": 10, "type": "expense", "occurred_at": "10/08/2025",
    }, headers=alice).status_code == 422
    assert client.post("/transactions", json={
        "amount": 10, "type": "expense", "occurred_at": "2025-08-10", "note": "n" * 256,
    }, headers=alice).status_code == 422


def test_blank_category_is_stored_as_none(client, alice):
    created = _transaction(client, alice, category_id="")
    assert created["category_id"] is None


def test_transaction_filters_and_order(client, alice, bob):
    food = _category(client, alice)
    late = _transaction(client, alice, occurred_at="2025-08-20", category_id=food["id"])
    early = _transaction(client, alice, occurred_at="2025-08-02", category_id=food["id"])
    salary = _transaction(client, alice, type="income", amount=5000, occurred_at="2025-08-01")
    _transaction(client, alice, occurred_at="2025-09-01")
    _transaction(client, bob, occurred_at="2025-08-05")

    august = client.get("/transactions", params={"from": "2025-08-01", "to": "2025-08-31"}, headers=alice).json()
    assert [t["id"] for t in august] == [salary["id"], early["id"], late["id"]]

    expenses = client.get("/transactions", params={"type": "expense", "categoryId": food["id"]}, headers=alice).json()
    assert [t["id"] for t in expenses] == [early["id"], late["id"]]

    assert client.get("/transactions", params={"from": "Aug 1"}, headers=alice).status_code == 422


def test_transaction_update_and_ownership(client, alice, bob):
    created = _transaction(client, alice, note="lunch")

    assert client.get(f"/transactions/{created['id']}", headers=bob).status_code == 404
    assert client.patch(f"/transactions/{created['id']}", json={"amount": 5}, headers=bob).status_code == 404

    updated = client.patch(f"/transactions/{created['id']}", json={"amount": 250.5}, headers=alice).json()
    assert updated["amount"] == 250.5
    assert updated["note"] == "lunch"

    assert client.delete(f"/transactions/{created['id']}", headers=alice).status_code == 204
    assert client.get(f"/transactions/{created['id']}", headers=alice).status_code == 404


# ============================================================================
# BUDGETS
# ============================================================================


def test_budget_crud_and_progress(client, alice):
    food = _category(client, alice)
    budget = client.post("/budgets", json={
        "category_id": food["id"], "month": 8, "year": 2025, "amount": 5000,
    }, headers=alice)
    assert budget.status_code == 201
    client.post("/budgets", json={
        "category_id": food["id"], "month": 9, "year": 2025, "amount": 4000,
    }, headers=alice)
    _transaction(client, alice, amount=1200, category_id=food["id"], occurred_at="2025-08-31")
    _transaction(client, alice, amount=999, category_id=food["id"], occurred_at="2025-09-01")

    august = client.get("/budgets", params={"month": 8, "year": 2025}, headers=alice).json()
    assert [b["amount"] for b in august] == [5000]

    progress = client.get("/budgets/progress/2025/8", headers=alice).json()
    assert progress == [{
        "budget_id": budget.json()["id"],
        "category_id": food["id"],
        "category": "Food",
        "planned": 5000,
        "actual": 1200,
    }]

    patched = client.patch(f"/budgets/{budget.json()['id']}", json={"amount": 6000}, headers=alice)
    assert patched.json()["amount"] == 6000
    assert client.delete(f"/budgets/{budget.json()['id']}", headers=alice).status_code == 204


def test_budget_validation(client, alice):
    assert client.post("/budgets", json={
        "category_id": "c1", "month": 13, "year": 2025, "amount": 10,
    }, headers=alice).status_code == 422
    assert client.post("/budgets", json={
        "category_id": "c1", "month": 1, "year": 2025, "amount": 0,
    }, headers=alice).status_code == 422


# ============================================================================
# REPORTS
# ============================================================================


def test_report_endpoints(client, alice):
    food = _category(client, alice)
    _transaction(client, alice, type="income", amount=1000, occurred_at="2025-07-01")
    _transaction(client, alice, amount=300, category_id=food["id"], occurred_at="2025-07-15")
    _transaction(client, alice, amount=200, occurred_at="2025-08-02")

    kpis = client.get("/reports/kpis", headers=alice).json()
    assert kpis == {"income": 1000, "expense": 500, "net": 500, "count": 3}

    breakdown = client.get("/reports/breakdown", params={"from": "2025-07-01"}, headers=alice).json()
    assert [(row["name"], row["amount"]) for row in breakdown] == [("Food", 300), ("Uncategorized", 200)]

    trend = client.get("/reports/trend", headers=alice).json()
    assert trend == [
        {"label": "2025-07", "income": 1000, "expense": 300},
        {"label": "2025-08", "income": 0, "expense": 200},
    ]


# ============================================================================
# HEALTH
# ============================================================================


def test_root_and_health(client):
    assert client.get("/").json()["ai_provider"] == "mock"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["service"] == "Fintrack"


def test_db_health(client, alice):
    _category(client, alice)
    body = client.get("/health/db").json()
    assert body["connected"] is True
    assert body["collections_count"] == 1


def test_db_health_failure_is_503(settings, mock_provider):
    app = create_app(settings=settings, db=BrokenFirestore(), ai_provider=mock_provider)
    response = TestClient(app).get("/health/db")
    assert response.status_code == 503
    assert response.json() == {"detail": "Database connection failed"}
