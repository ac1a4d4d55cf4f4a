import logging
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services import analytics_service
from onesync.services.stripe_service import StripeService, get_stripe_service
from onesync.schemas.analytics import (
    TimeRange,
    AnalyticsRecordCreate,
    AnalyticsRecordResponse,
    ConsolidatedAnalytics,
    DashboardOverview,
    TopTrack,
    EnhancedSales,
    SyncResult,
)
from onesync.models.user import User
from onesync.core.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analytics")

@router.get("/consolidated", response_model=ConsolidatedAnalytics)
async def get_consolidated_analytics(
    time_range: TimeRange = "30d",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await analytics_service.consolidated_analytics(db, current_user.id, time_range)


@router.get("/overview", response_model=DashboardOverview)
async def get_dashboard_overview(
    time_range: TimeRange = "30d",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Revenue, platform split and plays for the dashboard cards."""
    return await analytics_service.dashboard_overview(db, current_user.id, time_range)


@router.get("/top-tracks", response_model=List[TopTrack])
async def get_top_tracks(
    time_range: TimeRange = "30d",
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await analytics_service.top_tracks(db, current_user.id, time_range, limit)


@router.get("/enhanced-sales", response_model=EnhancedSales)
async def get_enhanced_sales(
    time_range: TimeRange = "30d",
    include_stripe: bool = True,
    include_platforms: bool = True,
    db: AsyncSession = Depends(get_db),
    stripe: StripeService = Depends(get_stripe_service),
    current_user: User = Depends(get_current_user)
):
    return await analytics_service.enhanced_sales(
        db, current_user.id, time_range, stripe,
        include_stripe=include_stripe, include_platforms=include_platforms,
    )


@router.post("/records", response_model=List[AnalyticsRecordResponse], status_code=status.HTTP_201_CREATED)
async def ingest_analytics_records(
    records: List[AnalyticsRecordCreate],
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Bulk insert of platform analytics rows for the caller."""
    return await analytics_service.ingest_records(db, current_user.id, records)


@router.post("/sync", response_model=SyncResult)
async def sync_analytics(current_user: User = Depends(get_current_user)):
    # Platform pulls post their rows to /analytics/records
    logger.info(f"Analytics sync requested by user {current_user.id}")
    return SyncResult(success=True, message="Analytics sync started")
