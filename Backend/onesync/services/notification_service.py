"""
Notifications are derived from recent track and payment activity on every
request; nothing is stored.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from onesync.models.payment import PaymentHistory
from onesync.models.track import Track
from onesync.services.database import utcnow

logger = logging.getLogger(__name__)

RECENT_TRACKS = 10
RECENT_PAYMENTS = 5


def as_utc(value: Optional[datetime]) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC so they sort with aware ones."""
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def track_notification(track: Track) -> Optional[dict]:
    if track.status == "live":
        return {
            "id": f"track-live-{track.id}",
            "type": "success",
            "title": "Track Now Live",
            "message": f'Your track "{track.title}" is now available on all selected platforms!',
            "created_at": as_utc(track.updated_at or track.created_at),
            "read": False,
            "action_url": "music",
        }
    if track.status == "processing":
        return {
            "id": f"track-processing-{track.id}",
            "type": "info",
            "title": "Track Processing",
            "message": f'Your track "{track.title}" is being processed for distribution.',
            "created_at": as_utc(track.created_at),
            "read": False,
            "action_url": "music",
        }
    if track.status == "failed":
        return {
            "id": f"track-failed-{track.id}",
            "type": "error",
            "title": "Distribution Failed",
            "message": f'There was an issue distributing "{track.title}". Please check your track details.',
            "created_at": as_utc(track.updated_at or track.created_at),
            "read": False,
            "action_url": "music",
        }
    return None


def payment_notification(payment: PaymentHistory) -> Optional[dict]:
    if payment.status != "completed":
        return None
    return {
        "id": f"payment-{payment.id}",
        "type": "success",
        "title": "Payment Received",
        "message": f"You received {payment.amount:.2f} from {payment.platform}.",
        "created_at": as_utc(payment.created_at),
        "read": False,
        "action_url": "earnings",
    }


def welcome_notifications(now: Optional[datetime] = None) -> List[dict]:
    now = now or utcnow()
    return [
        {
            "id": "welcome-1",
            "type": "info",
            "title": "Welcome to OneSync!",
            "message": "Start by uploading your first track to begin your music distribution journey.",
            "created_at": now,
            "read": False,
            "action_url": "dashboard",
        },
        {
            "id": "welcome-2",
            "type": "warning",
            "title": "Complete Your Profile",
            "message": "Add your artist information and payment details to get started earning.",
            "created_at": now - timedelta(hours=1),
            "read": False,
            "action_url": "settings",
        },
        {
            "id": "welcome-3",
            "type": "info",
            "title": "Explore Analytics",
            "message": "Check out the analytics section to track your music performance.",
            "created_at": now - timedelta(hours=2),
            "read": True,
            "action_url": "analytics",
        },
    ]


async def get_notifications(db: AsyncSession, user_id: uuid.UUID) -> dict:
    tracks = (await db.execute(
        select(Track).where(Track.user_id == user_id).order_by(Track.created_at.desc()).limit(RECENT_TRACKS)
    )).scalars().all()
    payments = (await db.execute(
        select(PaymentHistory)
        .where(PaymentHistory.user_id == user_id)
        .order_by(PaymentHistory.created_at.desc())
        .limit(RECENT_PAYMENTS)
    )).scalars().all()

    notifications = [n for n in map(track_notification, tracks) if n]
    notifications += [n for n in map(payment_notification, payments) if n]
    if not notifications:
        notifications = welcome_notifications()

    notifications.sort(key=lambda n: n["created_at"], reverse=True)
    unread = sum(1 for n in notifications if not n["read"])
    logger.debug(f"Generated {len(notifications)} notification(s) for user {user_id}")
    return {"notifications": notifications, "unread_count": unread}
