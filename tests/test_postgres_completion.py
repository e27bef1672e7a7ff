"""
PostgreSQL integration tests for the completion set and pending campaigns.

Skipped unless DATABASE_URL points at a reachable PostgreSQL instance.
"""
import asyncio
import os
import uuid

import pytest

pytestmark = pytest.mark.skipif(
    not os.environ.get("DATABASE_URL"),
    reason="DATABASE_URL is not set; skipping PostgreSQL integration tests.",
)


def _run(scenario):
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from sqlalchemy.pool import NullPool

    from core.config import settings
    from db.database import Base, register_models

    async def main():
        engine = create_async_engine(settings.database_url, poolclass=NullPool)
        try:
            register_models()
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            await scenario(async_sessionmaker(engine, expire_on_commit=False))
        finally:
            await engine.dispose()

    asyncio.run(main())


def _vin():
    return uuid.uuid4().hex[:17].upper()


async def _brand_and_model(sessions):
    from schemas.brands import BrandCreate, CarModelCreate
    from services import catalog

    suffix = uuid.uuid4().hex[:8]
    async with sessions() as db:
        brand = await catalog.create_brand(db, BrandCreate(name=f"Brand {suffix}", country="DE"))
    async with sessions() as db:
        model = await catalog.create_car_model(db, brand["id"], CarModelCreate(name=f"Model {suffix}"))
    return brand["id"], model["id"]


async def _vehicle(sessions, brand_id, model_id, vin=None):
    from schemas.cars import CarCreate
    from services import catalog

    async with sessions() as db:
        car = await catalog.create_vehicle(db, CarCreate(
            brand_id=brand_id, model_id=model_id, year=2022, price=30000, color="Grey",
            vin=vin or _vin(), fuel_type="Diesel", transmission="Manual",
        ))
    return car["id"]


async def _campaign(sessions, brand_id, model_id, **kw):
    from schemas.service_campaigns import ServiceCampaignCreate
    from services import campaigns

    async with sessions() as db:
        c = await campaigns.create_campaign(db, ServiceCampaignCreate(
            article=f"SC-{uuid.uuid4().hex[:10]}", name="Recall", brand_id=brand_id, car_model_id=model_id, **kw
        ))
    return c["id"]


async def _completed(sessions, vehicle_id):
    from services import catalog

    async with sessions() as db:
        return list((await catalog.get_vehicle(db, vehicle_id)).completed_service_campaigns)


def test_wildcard_campaign_pending_until_marked():
    from services import completion, eligibility

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        cid = await _campaign(sessions, brand_id, model_id)

        async with sessions() as db:
            assert [c.id for c in await eligibility.pending_for(db, vid)] == [cid]
        async with sessions() as db:
            assert await completion.mark_completed(db, vid, cid) is not None
        async with sessions() as db:
            assert await eligibility.pending_for(db, vid) == []
        async with sessions() as db:
            await completion.unmark_completed(db, vid, cid)
        async with sessions() as db:
            assert [c.id for c in await eligibility.pending_for(db, vid)] == [cid]

    _run(scenario)


def test_mandatory_campaign_first():
    from services import eligibility

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        mandatory = await _campaign(sessions, brand_id, model_id, is_mandatory=True)
        optional = await _campaign(sessions, brand_id, model_id)
        await _campaign(sessions, brand_id, model_id, target_vins=[_vin()])

        async with sessions() as db:
            assert [c.id for c in await eligibility.pending_for(db, vid)] == [mandatory, optional]

    _run(scenario)


def test_pending_for_unknown_vehicle_is_empty():
    from services import eligibility

    async def scenario(sessions):
        async with sessions() as db:
            assert await eligibility.pending_for(db, uuid.uuid4()) == []

    _run(scenario)


def test_mark_twice_is_idempotent_and_clear_twice_is_noop():
    from services import completion

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        cid = await _campaign(sessions, brand_id, model_id)

        async with sessions() as db:
            assert await completion.mark_completed(db, vid, cid) is not None
        async with sessions() as db:
            assert await completion.mark_completed(db, vid, cid) is None
        assert await _completed(sessions, vid) == [cid]

        for _ in range(2):
            async with sessions() as db:
                assert (await completion.clear_completed(db, vid))["completed_service_campaigns"] == []

    _run(scenario)


def test_mark_unknown_campaign_is_not_found():
    from core.errors import NotFound
    from services import completion

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        async with sessions() as db:
            with pytest.raises(NotFound):
                await completion.mark_completed(db, vid, uuid.uuid4())

    _run(scenario)


def test_reverse_lookup_tracks_marks_and_unmarks():
    from services import completion

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        cid = await _campaign(sessions, brand_id, model_id)
        v1 = await _vehicle(sessions, brand_id, model_id)
        v2 = await _vehicle(sessions, brand_id, model_id)
        await _vehicle(sessions, brand_id, model_id)

        for vid in (v1, v2):
            async with sessions() as db:
                await completion.mark_completed(db, vid, cid)
        async with sessions() as db:
            await completion.unmark_completed(db, v1, cid)

        async with sessions() as db:
            cars = await completion.vehicles_by_completed_campaign(db, cid)
        assert {c.id for c in cars} == {v2}

    _run(scenario)


def test_concurrent_marks_of_different_campaigns_all_land():
    from services import completion

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        cids = [await _campaign(sessions, brand_id, model_id) for _ in range(8)]

        async def mark(cid):
            async with sessions() as db:
                return await completion.mark_completed(db, vid, cid)

        await asyncio.gather(*(mark(c) for c in cids))
        assert sorted(await _completed(sessions, vid)) == sorted(cids)

    _run(scenario)


def test_concurrent_duplicate_marks_leave_one_entry():
    from services import completion

    async def scenario(sessions):
        brand_id, model_id = await _brand_and_model(sessions)
        vid = await _vehicle(sessions, brand_id, model_id)
        cid = await _campaign(sessions, brand_id, model_id)

        async def mark():
            async with sessions() as db:
                return await completion.mark_completed(db, vid, cid)

        results = await asyncio.gather(*(mark() for _ in range(10)))
        assert sum(r is not None for r in results) == 1
        assert await _completed(sessions, vid) == [cid]

    _run(scenario)
