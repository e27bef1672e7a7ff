from uuid import uuid4

import pytest
from pydantic import ValidationError

from db.car import FuelType, Transmission
from db.service_campaign import CampaignStatus
from schemas.cars import CarCreate
from schemas.service_campaigns import CampaignStatusUpdate, ServiceCampaignCreate
from schemas.warehouse import StockMovement, StockMovementType, WarehouseEntryCreate, WarehouseEntryUpdate


def test_entry_rejects_negative_quantity():
    with pytest.raises(ValidationError):
        WarehouseEntryCreate(part_id=uuid4(), quantity=-1)


def test_entry_levels_default_to_none_and_location_is_stripped():
    e = WarehouseEntryCreate(part_id=uuid4(), quantity=0, location="  A-01  ")
    assert e.min_stock_level is None
    assert e.max_stock_level is None
    assert e.location == "A-01"


def test_blank_location_becomes_none():
    assert WarehouseEntryCreate(part_id=uuid4(), quantity=1, location="   ").location is None


def test_update_tracks_only_sent_fields():
    u = WarehouseEntryUpdate(location=None)
    assert u.model_dump(exclude_unset=True) == {"location": None}


@pytest.mark.parametrize("qty", [0, -5])
def test_movement_quantity_must_be_positive(qty):
    with pytest.raises(ValidationError):
        StockMovement(quantity=qty, movement_type="incoming")


def test_movement_type_is_closed():
    assert StockMovement(quantity=1, movement_type="outgoing").movement_type is StockMovementType.OUTGOING
    with pytest.raises(ValidationError):
        StockMovement(quantity=1, movement_type="transfer")


def _car(**kw):
    data = dict(
        brand_id=uuid4(),
        model_id=uuid4(),
        year=2020,
        price=15000,
        color="Red",
        vin="wvwzzz1jzxw000001",
        fuel_type="Petrol",
        transmission="Manual",
    )
    data.update(kw)
    return CarCreate(**data)


def test_car_vin_is_normalized():
    c = _car()
    assert c.vin == "WVWZZZ1JZXW000001"
    assert c.fuel_type is FuelType.PETROL
    assert c.transmission is Transmission.MANUAL
    assert c.mileage == 0


@pytest.mark.parametrize("override", [
    {"vin": "SHORT"},
    {"year": 1989},
    {"price": -1},
    {"mileage": -1},
    {"fuel_type": "Steam"},
])
def test_car_rejects_invalid(override):
    with pytest.raises(ValidationError):
        _car(**override)


def test_campaign_vins_are_normalized_and_deduped():
    c = ServiceCampaignCreate(
        article="SC-001",
        name="Brake recall",
        brand_id=uuid4(),
        car_model_id=uuid4(),
        target_vins=["wvwzzz1jzxw000001", " WVWZZZ1JZXW000001 ", ""],
    )
    assert c.target_vins == ["WVWZZZ1JZXW000001"]
    assert c.is_mandatory is False


def test_campaign_requires_article():
    with pytest.raises(ValidationError):
        ServiceCampaignCreate(article="  ", name="x", brand_id=uuid4(), car_model_id=uuid4())


def test_status_accepts_any_case():
    assert CampaignStatusUpdate(status="Active").status is CampaignStatus.ACTIVE
    assert CampaignStatusUpdate(status="CANCELLED").status is CampaignStatus.CANCELLED


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        CampaignStatusUpdate(status="archived")


def test_quantities_fit_the_integer_column():
    from db.warehouse import MAX_QUANTITY

    assert StockMovement(quantity=MAX_QUANTITY, movement_type="incoming").quantity == MAX_QUANTITY
    with pytest.raises(ValidationError):
        StockMovement(quantity=MAX_QUANTITY + 1, movement_type="incoming")
    with pytest.raises(ValidationError):
        WarehouseEntryCreate(part_id=uuid4(), quantity=MAX_QUANTITY + 1)
    with pytest.raises(ValidationError):
        WarehouseEntryUpdate(min_stock_level=MAX_QUANTITY + 1)
