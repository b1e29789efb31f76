"""
Test Suite Configuration
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from backoffice.config import Settings
from backoffice.container import Backoffice, create_backoffice
from backoffice.main import create_app
from backoffice.serving.api.dependencies import get_owner_id
from backoffice.storage.models import User


class FrozenClock:
    """Clock that only moves when told to"""
    
    def __init__(self, now: datetime):
        self.now = now
    
    def __call__(self) -> datetime:
        return self.now
    
    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at 2025-01-15 12:00 UTC"""
    return FrozenClock(datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def backoffice(clock) -> Backoffice:
    """Services over a fresh, empty store"""
    return create_backoffice(clock=clock)


@pytest.fixture
def store(backoffice):
    return backoffice.store


@pytest.fixture
def owner(backoffice) -> User:
    """The shop owner every test acts as"""
    return backoffice.users.create_user({
        "username": "demo",
        "name": "Tom Cook",
        "email": "tom@example.com",
    })


@pytest.fixture
def other_owner(backoffice, owner) -> User:
    """A second owner whose data must never leak into the first one's views"""
    return backoffice.users.create_user({
        "username": "other",
        "name": "Ada Other",
        "email": "ada@example.com",
    })


@pytest.fixture
def product_data() -> dict:
    return {
        "name": "Premium Headphones",
        "description": "High quality headphones",
        "price": 159.0,
        "cost": 80.0,
        "stock": 25,
    }


@pytest.fixture
def order_data() -> dict:
    return {
        "customer_name": "Sarah Johnson",
        "customer_email": "sarah@example.com",
        "shipping_address": "123 Main St, City, State, 12345",
        "total": 159.0,
    }


@pytest.fixture
def make_item():
    """Factory for line item payloads priced from a product"""
    def _make_item(product, quantity: int = 1) -> dict:
        return {
            "product_id": product.id,
            "product_name": product.name,
            "price": product.price,
            "quantity": quantity,
            "total": product.price * quantity,
        }
    return _make_item


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
        seed_sample_data=False,
    )


@pytest.fixture
def client(backoffice, owner, test_settings) -> TestClient:
    """API client over the test store, acting as the owner fixture"""
    app = create_app(backoffice=backoffice, settings=test_settings)
    app.dependency_overrides[get_owner_id] = lambda: owner.id
    return TestClient(app)
