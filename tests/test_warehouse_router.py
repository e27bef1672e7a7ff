from uuid import uuid4

from core.errors import Conflict, InsufficientStock, NotFound
from schemas.warehouse import StockMovementType
from services import stock_ledger


def test_create_entry(client, entry_row, monkeypatch):
    part_id = uuid4()
    seen = {}

    async def fake_create(db, payload):
        seen["payload"] = payload
        return entry_row(part_id=part_id, quantity=payload.quantity)

    monkeypatch.setattr(stock_ledger, "create", fake_create)
    r = client.post("/api/warehouse/", json={"part_id": str(part_id), "quantity": 10, "min_stock_level": 5})
    assert r.status_code == 201
    assert r.json()["part_id"] == str(part_id)
    assert seen["payload"].min_stock_level == 5
    assert seen["payload"].max_stock_level is None


def test_create_entry_negative_quantity_never_reaches_the_ledger(client, monkeypatch):
    async def fail(db, payload):
        raise AssertionError("ledger must not be called")

    monkeypatch.setattr(stock_ledger, "create", fail)
    r = client.post("/api/warehouse/", json={"part_id": str(uuid4()), "quantity": -1})
    assert r.status_code == 422
    assert r.json()["error"] == "validation_failed"


def test_create_entry_conflict(client, monkeypatch):
    async def fake_create(db, payload):
        raise Conflict("Warehouse entry for this part already exists")

    monkeypatch.setattr(stock_ledger, "create", fake_create)
    r = client.post("/api/warehouse/", json={"part_id": str(uuid4()), "quantity": 1})
    assert r.status_code == 409
    assert r.json() == {"error": "conflict", "detail": "Warehouse entry for this part already exists"}


def test_movement_passes_type_through(client, entry_row, monkeypatch):
    part_id = uuid4()
    seen = {}

    async def fake_apply(db, pid, movement):
        seen["part_id"] = pid
        seen["movement"] = movement
        return entry_row(part_id=pid, quantity=3)

    monkeypatch.setattr(stock_ledger, "apply_movement", fake_apply)
    r = client.put(f"/api/warehouse/{part_id}/stock", json={"quantity": 3, "movement_type": "adjustment"})
    assert r.status_code == 200
    assert r.json()["quantity"] == 3
    assert seen["part_id"] == part_id
    assert seen["movement"].movement_type is StockMovementType.ADJUSTMENT


def test_insufficient_stock_is_404_with_own_code(client, monkeypatch):
    async def fake_apply(db, pid, movement):
        raise InsufficientStock("Insufficient stock: requested 12")

    monkeypatch.setattr(stock_ledger, "apply_movement", fake_apply)
    r = client.put(f"/api/warehouse/{uuid4()}/stock", json={"quantity": 12, "movement_type": "outgoing"})
    assert r.status_code == 404
    assert r.json()["error"] == "insufficient_stock"


def test_movement_on_missing_entry(client, monkeypatch):
    async def fake_apply(db, pid, movement):
        raise NotFound("Warehouse entry not found")

    monkeypatch.setattr(stock_ledger, "apply_movement", fake_apply)
    r = client.put(f"/api/warehouse/{uuid4()}/stock", json={"quantity": 1, "movement_type": "incoming"})
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_zero_movement_rejected(client):
    r = client.put(f"/api/warehouse/{uuid4()}/stock", json={"quantity": 0, "movement_type": "incoming"})
    assert r.status_code == 422


def test_low_stock_route_is_not_an_entry_id(client, entry_row, monkeypatch):
    async def fake_low(db):
        return [entry_row(quantity=0, part_article="BRK-001", part_name="Brake pad")]

    monkeypatch.setattr(stock_ledger, "low_stock", fake_low)
    r = client.get("/api/warehouse/low-stock")
    assert r.status_code == 200
    assert r.json()[0]["part_article"] == "BRK-001"


def test_total_value(client, monkeypatch):
    async def fake_total(db):
        return 0.0

    monkeypatch.setattr(stock_ledger, "total_value", fake_total)
    r = client.get("/api/warehouse/total-value")
    assert r.status_code == 200
    assert r.json() == {"total_value": 0.0}


def test_get_entry_missing(client, monkeypatch):
    async def fake_get(db, entry_id):
        return None

    monkeypatch.setattr(stock_ledger, "get", fake_get)
    r = client.get(f"/api/warehouse/{uuid4()}")
    assert r.status_code == 404


def test_delete_entry(client, monkeypatch):
    results = iter([True, False])

    async def fake_delete(db, entry_id):
        return next(results)

    monkeypatch.setattr(stock_ledger, "delete", fake_delete)
    entry_id = uuid4()
    assert client.delete(f"/api/warehouse/{entry_id}").status_code == 204
    assert client.delete(f"/api/warehouse/{entry_id}").status_code == 404


def test_oversized_values_never_reach_the_ledger(client, monkeypatch):
    async def fail(*args):
        raise AssertionError("ledger must not be called")

    monkeypatch.setattr(stock_ledger, "create", fail)
    monkeypatch.setattr(stock_ledger, "apply_movement", fail)
    monkeypatch.setattr(stock_ledger, "update", fail)
    too_big = 2**31

    r = client.post("/api/warehouse/", json={"part_id": str(uuid4()), "quantity": too_big})
    assert r.status_code == 422
    assert r.json()["error"] == "validation_failed"

    r = client.post("/api/warehouse/", json={"part_id": str(uuid4()), "quantity": 1, "max_stock_level": too_big})
    assert r.status_code == 422

    r = client.put(f"/api/warehouse/{uuid4()}/stock", json={"quantity": too_big, "movement_type": "incoming"})
    assert r.status_code == 422

    r = client.put(f"/api/warehouse/{uuid4()}", json={"quantity": too_big})
    assert r.status_code == 422
