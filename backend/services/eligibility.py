"""
Which active service campaigns a vehicle still owes.

``is_pending`` and ``resolve_pending`` are pure: they work on anything exposing
the vehicle / campaign attributes (ORM rows, dicts wrapped in a namespace,
test doubles) and touch no store. ``pending_for`` is the only function that
reads, and it never writes.
"""
import logging
from typing import Iterable, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from db.service_campaign import CampaignStatus
from services import campaigns as campaign_catalog
from services import catalog

logger = logging.getLogger(__name__)


def _targets_vin(campaign, vin: str) -> bool:
    targets = campaign.target_vins or []
    if not targets:
        return True
    vin = (vin or "").strip().upper()
    return any((t or "").strip().upper() == vin for t in targets)


def is_pending(vehicle, campaign) -> bool:
    """True when ``campaign`` is active, targets ``vehicle`` and the vehicle has not completed it."""
    if campaign.status != CampaignStatus.ACTIVE:
        return False
    if campaign.brand_id != vehicle.brand_id or campaign.car_model_id != vehicle.model_id:
        return False
    if not _targets_vin(campaign, vehicle.vin):
        return False
    return campaign.id not in (vehicle.completed_service_campaigns or [])


def resolve_pending(vehicle, campaigns: Iterable) -> list:
    """Filter to pending campaigns; mandatory first, then newest first."""
    pending = [c for c in campaigns if is_pending(vehicle, c)]
    # two stable sorts: secondary key first
    pending.sort(key=lambda c: c.created_at, reverse=True)
    pending.sort(key=lambda c: not c.is_mandatory)
    return pending


async def pending_for(db: AsyncSession, vehicle_id: UUID) -> List:
    vehicle = await catalog.get_vehicle(db, vehicle_id)
    if vehicle is None:
        return []
    candidates = await campaign_catalog.list_active(db, vehicle.brand_id, vehicle.model_id)
    pending = resolve_pending(vehicle, candidates)
    logger.debug("Vehicle %s: %d of %d candidate campaigns pending", vehicle_id, len(pending), len(candidates))
    return pending
