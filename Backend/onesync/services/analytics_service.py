import logging
import uuid
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from onesync.core.exceptions import OneSyncException, ValidationFailed
from onesync.models.analytics import AnalyticsRecord
from onesync.models.track import Track
from onesync.schemas.analytics import AnalyticsRecordCreate
from onesync.services.stripe_service import StripeService

logger = logging.getLogger(__name__)

TIME_RANGES = ("7d", "30d", "90d", "12m")
PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "12m": 365}
MONTHLY_DIVISOR = {"12m": 12, "90d": 3}
WEEKLY_DIVISOR = {"12m": 52, "90d": 13, "30d": 4}
# Monthly and weekly change are scaled down from the period change
MONTHLY_CHANGE_FACTOR = 0.8
WEEKLY_CHANGE_FACTOR = 0.6


def date_window(time_range: str, today: Optional[date] = None) -> Tuple[date, date]:
    """(start, end) of the window ending today."""
    if time_range not in TIME_RANGES:
        raise ValidationFailed(f"Invalid time range: {time_range}")
    end = today or date.today()
    if time_range == "12m":
        try:
            start = end.replace(year=end.year - 1)
        except ValueError:
            # Feb 29th
            start = end.replace(year=end.year - 1, day=28)
    else:
        start = end - timedelta(days=PERIOD_DAYS[time_range])
    return start, end


def percent_change(current: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def trend(change: float) -> str:
    return "up" if change >= 0 else "down"


def aggregate(records, key: str) -> Dict[str, Dict[str, float]]:
    stats = defaultdict(lambda: {"plays": 0, "revenue": 0.0})
    for record in records:
        bucket = stats[getattr(record, key) or "Unknown"]
        bucket["plays"] += record.plays or 0
        bucket["revenue"] += record.revenue or 0.0
    return dict(stats)


async def records_between(
    db: AsyncSession, user_id: uuid.UUID, start: date, end: date, include_end: bool = True
) -> List[AnalyticsRecord]:
    end_clause = AnalyticsRecord.date <= end if include_end else AnalyticsRecord.date < end
    result = await db.execute(
        select(AnalyticsRecord)
        .where(AnalyticsRecord.user_id == user_id, AnalyticsRecord.date >= start, end_clause)
        .order_by(AnalyticsRecord.date.asc())
    )
    return list(result.scalars().all())


async def consolidated_analytics(db: AsyncSession, user_id: uuid.UUID, time_range: str) -> dict:
    start, end = date_window(time_range)
    records = await records_between(db, user_id, start, end)

    platform_stats = aggregate(records, "platform")
    geo_stats = aggregate(records, "country")
    return {
        "platform_stats": platform_stats,
        "geo_stats": geo_stats,
        "total_plays": sum(s["plays"] for s in platform_stats.values()),
        "total_revenue": sum(s["revenue"] for s in platform_stats.values()),
        "raw_data": records,
    }


async def dashboard_overview(db: AsyncSession, user_id: uuid.UUID, time_range: str) -> dict:
    start, end = date_window(time_range)
    records = await records_between(db, user_id, start, end)

    total_revenue = sum(r.revenue or 0.0 for r in records)
    total_plays = sum(r.plays or 0 for r in records)

    # Previous period of equal length, ending where this one starts
    previous_start = start - timedelta(days=PERIOD_DAYS[time_range])
    previous = await records_between(db, user_id, previous_start, start, include_end=False)
    previous_revenue = sum(r.revenue or 0.0 for r in previous)
    previous_plays = sum(r.plays or 0 for r in previous)

    revenue_change = percent_change(total_revenue, previous_revenue)
    plays_change = percent_change(total_plays, previous_plays)

    platforms = [
        {
            "name": name,
            "plays": stats["plays"],
            "revenue": round(stats["revenue"], 2),
            "percentage": round(stats["revenue"] / total_revenue * 100) if total_revenue > 0 else 0,
        }
        for name, stats in aggregate(records, "platform").items()
    ]
    platforms.sort(key=lambda p: p["revenue"], reverse=True)

    live_tracks = await db.scalar(
        select(func.count()).select_from(Track).where(Track.user_id == user_id, Track.status == "live")
    )

    monthly_divisor = MONTHLY_DIVISOR.get(time_range, 1)
    weekly_divisor = WEEKLY_DIVISOR.get(time_range, 1)
    return {
        "time_range": time_range,
        "revenue": {
            "total": {
                "amount": round(total_revenue, 2),
                "change": round(revenue_change, 2),
                "trend": trend(revenue_change),
            },
            "monthly": {
                "amount": round(total_revenue / monthly_divisor, 2),
                "change": round(revenue_change * MONTHLY_CHANGE_FACTOR, 2),
                "trend": trend(revenue_change),
            },
            "weekly": {
                "amount": round(total_revenue / weekly_divisor, 2),
                "change": round(revenue_change * WEEKLY_CHANGE_FACTOR, 2),
                "trend": trend(revenue_change),
            },
        },
        "platforms": platforms,
        "total_plays": total_plays,
        "plays_change": round(plays_change, 2),
        "live_tracks": live_tracks or 0,
    }


async def top_tracks(db: AsyncSession, user_id: uuid.UUID, time_range: str, limit: int = 10) -> List[dict]:
    start, end = date_window(time_range)
    plays = func.coalesce(func.sum(AnalyticsRecord.plays), 0).label("plays")
    revenue = func.coalesce(func.sum(AnalyticsRecord.revenue), 0.0).label("revenue")
    result = await db.execute(
        select(Track.id, Track.title, Track.artist, plays, revenue)
        .join(AnalyticsRecord, AnalyticsRecord.track_id == Track.id)
        .where(
            AnalyticsRecord.user_id == user_id,
            AnalyticsRecord.date >= start,
            AnalyticsRecord.date <= end,
        )
        .group_by(Track.id, Track.title, Track.artist)
        .order_by(plays.desc())
        .limit(limit)
    )
    return [
        {"track_id": row.id, "title": row.title, "artist": row.artist,
         "plays": int(row.plays), "revenue": round(float(row.revenue), 2)}
        for row in result.all()
    ]


async def enhanced_sales(
    db: AsyncSession,
    user_id: uuid.UUID,
    time_range: str,
    stripe: StripeService,
    include_stripe: bool = True,
    include_platforms: bool = True,
) -> dict:
    """Stripe payments plus platform revenue. A failing source counts as empty."""
    transactions = []
    if include_stripe:
        try:
            data = await stripe.get_balance_transactions(limit=100, type="payment")
            transactions = data.get("data", []) if isinstance(data, dict) else []
        except OneSyncException as e:
            logger.warning(f"Stripe balance transactions unavailable: {e.detail}")

    platform_revenue, total_plays = 0.0, 0
    if include_platforms:
        consolidated = await consolidated_analytics(db, user_id, time_range)
        platform_revenue = consolidated["total_revenue"]
        total_plays = consolidated["total_plays"]

    stripe_revenue = sum((txn.get("net") or 0) / 100 for txn in transactions)
    return {
        "total_revenue": round(stripe_revenue + platform_revenue, 2),
        "stripe_revenue": round(stripe_revenue, 2),
        "platform_revenue": round(platform_revenue, 2),
        "total_transactions": len(transactions),
        "total_plays": total_plays,
    }


async def ingest_records(
    db: AsyncSession, user_id: uuid.UUID, records: List[AnalyticsRecordCreate]
) -> List[AnalyticsRecord]:
    track_ids = {record.track_id for record in records if record.track_id}
    if track_ids:
        owned = await db.execute(select(Track.id).where(Track.id.in_(track_ids), Track.user_id == user_id))
        unknown = track_ids - set(owned.scalars().all())
        if unknown:
            raise ValidationFailed(f"Unknown track id(s): {', '.join(sorted(str(t) for t in unknown))}")

    rows = [AnalyticsRecord(user_id=user_id, **record.model_dump()) for record in records]
    db.add_all(rows)
    await db.commit()
    logger.info(f"Ingested {len(rows)} analytics record(s) for user {user_id}")
    return rows
