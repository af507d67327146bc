# tests/routers/test_portfolios_api.py
"""
Integration tests for Portfolio API endpoints.

These tests verify full HTTP request/response cycles for:
- POST /portfolios/ (Create)
- GET /portfolios/ (List with pagination)
- GET /portfolios/{id} (Read)
- PATCH /portfolios/{id} (Update)
- DELETE /portfolios/{id} (Delete)

Tests validate:
- Correct status codes
- Response structure matches schemas
- Pagination metadata (page, pages, has_next, has_previous)
- Error responses (403, 404, 422)
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import Holding, Portfolio, Transaction, TransactionType
from tests.conftest import (
    create_holding,
    create_investment,
    create_portfolio,
    create_transaction,
    create_user,
    day,
)


# =============================================================================
# TEST: POST /portfolios/ (Create)
# =============================================================================

class TestCreatePortfolio:
    """Tests for POST /portfolios/ endpoint."""

    def test_create_portfolio_success(self, auth_client: TestClient, sample_user):
        """Should create portfolio and return 201."""
        response = auth_client.post("/portfolios/", json={"name": "  Retirement  "})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Retirement"
        assert data["user_id"] == sample_user.id
        assert "id" in data
        assert "created_at" in data

    def test_owner_comes_from_session(self, auth_client: TestClient, db: Session, sample_user):
        other = create_user(db, email="other@example.com")

        response = auth_client.post("/portfolios/", json={"name": "Mine", "user_id": other.id})

        assert response.status_code == 201
        assert response.json()["user_id"] == sample_user.id

    def test_create_blank_name(self, auth_client: TestClient):
        response = auth_client.post("/portfolios/", json={"name": "   "})
        assert response.status_code == 422

    def test_create_missing_name(self, auth_client: TestClient):
        response = auth_client.post("/portfolios/", json={})

        assert response.status_code == 422
        fields = [d["field"] for d in response.json()["details"]]
        assert "body.name" in fields


# =============================================================================
# TEST: GET /portfolios/ (List)
# =============================================================================

class TestListPortfolios:

    def test_list_only_own(self, auth_client: TestClient, db: Session, sample_user):
        create_portfolio(db, sample_user, name="Mine")
        create_portfolio(db, create_user(db, email="other@example.com"), name="Theirs")

        response = auth_client.get("/portfolios/")

        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["items"]] == ["Mine"]
        assert data["pagination"]["total"] == 1

    def test_list_newest_first_with_pagination(self, auth_client: TestClient, db: Session, sample_user):
        for i in range(5):
            create_portfolio(db, sample_user, name=f"P{i}")

        response = auth_client.get("/portfolios/", params={"skip": 2, "limit": 2})

        data = response.json()
        assert [p["name"] for p in data["items"]] == ["P2", "P1"]
        meta = data["pagination"]
        assert meta["total"] == 5
        assert meta["page"] == 2
        assert meta["pages"] == 3
        assert meta["has_next"] is True
        assert meta["has_previous"] is True

    def test_list_search(self, auth_client: TestClient, db: Session, sample_user):
        create_portfolio(db, sample_user, name="ASX ETFs")
        create_portfolio(db, sample_user, name="Retirement")

        response = auth_client.get("/portfolios/", params={"search": "etf"})

        assert [p["name"] for p in response.json()["items"]] == ["ASX ETFs"]

    def test_list_includes_aggregates(self, auth_client: TestClient, db: Session, sample_portfolio):
        holding = create_holding(db, sample_portfolio, create_investment(db))
        create_transaction(db, holding, quantity="10", price_per_unit=1000)

        item = auth_client.get("/portfolios/").json()["items"][0]

        assert item["holdings_count"] == 1
        assert item["total_cost_base"] == 10000

    def test_list_limit_bounds(self, auth_client: TestClient):
        assert auth_client.get("/portfolios/", params={"limit": 0}).status_code == 422
        assert auth_client.get("/portfolios/", params={"skip": -1}).status_code == 422


# =============================================================================
# TEST: GET /portfolios/{id} (Read)
# =============================================================================

class TestGetPortfolio:

    def test_get_with_holdings(self, auth_client: TestClient, db: Session, sample_portfolio):
        holding = create_holding(db, sample_portfolio, create_investment(db))
        create_transaction(db, holding, quantity="10", price_per_unit=1000, transaction_date=day(1))
        create_transaction(db, holding, quantity="10", price_per_unit=1200, transaction_date=day(10))
        create_transaction(
            db, holding, transaction_type=TransactionType.SELL,
            quantity="5", price_per_unit=1500, transaction_date=day(20),
        )

        response = auth_client.get(f"/portfolios/{sample_portfolio.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["holdings_count"] == 1
        summary = data["holdings"][0]
        assert summary["investment"]["code"] == "VAS"
        assert float(summary["units"]) == 15
        assert summary["average_price"] == 1467
        assert summary["cost_base"] == 22005
        assert data["total_cost_base"] == 22005

    def test_get_not_found(self, auth_client: TestClient):
        response = auth_client.get("/portfolios/9999")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"

    def test_get_other_users_portfolio(self, auth_client: TestClient, db: Session):
        portfolio = create_portfolio(db, create_user(db, email="other@example.com"))

        response = auth_client.get(f"/portfolios/{portfolio.id}")

        assert response.status_code == 403
        assert response.json()["error"] == "ForbiddenError"


# =============================================================================
# TEST: PATCH /portfolios/{id} (Update)
# =============================================================================

class TestUpdatePortfolio:

    def test_rename(self, auth_client: TestClient, sample_portfolio):
        response = auth_client.patch(f"/portfolios/{sample_portfolio.id}", json={"name": "Renamed"})

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    def test_empty_body_changes_nothing(self, auth_client: TestClient, sample_portfolio):
        response = auth_client.patch(f"/portfolios/{sample_portfolio.id}", json={})

        assert response.status_code == 200
        assert response.json()["name"] == "Test Portfolio"

    def test_update_other_users_portfolio(self, auth_client: TestClient, db: Session):
        portfolio = create_portfolio(db, create_user(db, email="other@example.com"))

        response = auth_client.patch(f"/portfolios/{portfolio.id}", json={"name": "Mine now"})

        assert response.status_code == 403


# =============================================================================
# TEST: DELETE /portfolios/{id} (Delete)
# =============================================================================

class TestDeletePortfolio:

    def test_delete_cascades(self, auth_client: TestClient, db: Session, sample_portfolio):
        holding = create_holding(db, sample_portfolio, create_investment(db))
        create_transaction(db, holding)
        portfolio_id = sample_portfolio.id

        response = auth_client.delete(f"/portfolios/{portfolio_id}")

        assert response.status_code == 204
        db.expire_all()
        assert db.get(Portfolio, portfolio_id) is None
        assert db.query(Holding).count() == 0
        assert db.query(Transaction).count() == 0

    def test_delete_not_found(self, auth_client: TestClient):
        assert auth_client.delete("/portfolios/9999").status_code == 404
