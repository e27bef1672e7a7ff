from datetime import datetime, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from db.database import get_async_session
from main import app

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    # no lifespan: the store is never touched, services are monkeypatched per test
    app.dependency_overrides[get_async_session] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def entry_row():
    def make(**kw):
        row = dict(
            id=uuid4(),
            part_id=uuid4(),
            quantity=10,
            min_stock_level=5,
            max_stock_level=100,
            location="A-01",
            created_at=NOW,
            updated_at=NOW,
        )
        row.update(kw)
        return row
    return make


@pytest.fixture
def car_row():
    def make(**kw):
        row = dict(
            id=uuid4(),
            brand_id=uuid4(),
            model_id=uuid4(),
            year=2021,
            price=21000.0,
            mileage=0,
            color="Blue",
            vin="WVWZZZ1JZXW000001",
            fuel_type="Petrol",
            transmission="Automatic",
            status="Available",
            completed_service_campaigns=[],
            created_at=NOW,
            updated_at=NOW,
        )
        row.update(kw)
        return row
    return make


@pytest.fixture
def campaign_row():
    def make(**kw):
        row = dict(
            id=uuid4(),
            article="SC-001",
            name="Brake hose recall",
            description=None,
            brand_id=uuid4(),
            car_model_id=uuid4(),
            target_vins=[],
            required_parts=[],
            required_works=[],
            is_mandatory=False,
            is_completed=False,
            status="active",
            created_at=NOW,
            updated_at=NOW,
        )
        row.update(kw)
        return row
    return make
