# backend/tests/routers/conftest.py
"""
Fixtures for HTTP-level tests.

- client: TestClient with get_db pointed at the test session and the
  valuation service wired to an in-memory price provider
- login: signs a user in by setting the session cookie on the client
- auth_client: client already signed in as sample_user
"""

from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import clear_service_caches, get_valuation_service
from app.main import app
from app.models import User
from app.services.auth import AuthService
from app.services.pricing import PriceOracle
from app.services.valuation import ValuationService
from tests.conftest import MockPriceProvider

SESSION_COOKIE = "session_token"


@pytest.fixture
def price_provider() -> MockPriceProvider:
    return MockPriceProvider()


@pytest.fixture(scope="function")
def client(db: Session, price_provider: MockPriceProvider) -> TestClient:
    """Create TestClient with database and price dependency overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    valuation_service = ValuationService(price_oracle=PriceOracle(price_provider, max_workers=4))

    clear_service_caches()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_valuation_service] = lambda: valuation_service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
    clear_service_caches()


@pytest.fixture
def login(client: TestClient, db: Session) -> Callable[[User], TestClient]:
    """Sign `user` in on the shared client; the last call wins."""

    def _login(user: User) -> TestClient:
        grant = AuthService().create_session(db, user)
        client.cookies.set(SESSION_COOKIE, grant.token)
        return client

    return _login


@pytest.fixture
def auth_client(login, sample_user: User) -> TestClient:
    return login(sample_user)
