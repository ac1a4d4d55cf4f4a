import sys
import os
import asyncio
from datetime import date, timedelta

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

from onesync.core.security import get_password_hash
from onesync.models.user import User
from onesync.models.artist import Artist
from onesync.models.release import Release
from onesync.models.track import Track
from onesync.models.analytics import AnalyticsRecord
from onesync.models.payment import PaymentHistory
from onesync.models.withdrawal import WithdrawalRequest  # noqa: F401
from onesync.models.royalty_advance import RoyaltyAdvance
from onesync.models.background_job import BackgroundJob  # noqa: F401
from onesync.services.database import engine, SessionLocal

DEMO_EMAIL = "demo@onesync.example"
DEMO_PASSWORD = "demo-password"

PLATFORM_PLAYS = {"spotify": (420, 1.68), "apple": (180, 1.26), "youtube": (250, 0.5)}
COUNTRIES = ["US", "GB", "DE", "BR"]


async def create_demo_data():
    async with SessionLocal() as session:
        # Demo account
        user = User(
            email=DEMO_EMAIL,
            password_hash=get_password_hash(DEMO_PASSWORD),
            name="Demo Artist",
            role="artist",
            total_earnings=1250.75,
            available_balance=845.50,
            pending_payments=125.25,
            onboarding_completed=True,
        )
        session.add(user)
        await session.flush()

        # Demo artists
        artists = [
            Artist(user_id=user.id, name="Nova Lights", genre="Electronic", record_label="Independent"),
            Artist(user_id=user.id, name="The Quiet Hours", genre="Indie", sub_genre="Dream Pop"),
        ]
        session.add_all(artists)
        await session.flush()

        # Demo releases with their tracks
        today = date.today()
        releases = [
            Release(
                user_id=user.id,
                artist_id=artists[0].id,
                title="Midnight Circuit",
                release_type="EP",
                primary_artist="Nova Lights",
                label="Independent",
                cat_number="REL000001",
                main_genre="Electronic",
                release_date=today - timedelta(days=60),
                platforms=["spotify", "apple", "youtube"],
                retailers=["Spotify", "Apple Music", "YouTube Music"],
                track_count=2,
                status="live",
            ),
            Release(
                user_id=user.id,
                artist_id=artists[1].id,
                title="Slow Weather",
                release_type="Single",
                primary_artist="The Quiet Hours",
                cat_number="REL000002",
                main_genre="Indie",
                release_date=today + timedelta(days=14),
                platforms=["spotify", "apple"],
                track_count=1,
                status="pending",
            ),
        ]
        session.add_all(releases)
        await session.flush()

        tracks = [
            Track(
                user_id=user.id, release_id=releases[0].id, artist_id=artists[0].id,
                title="Midnight Circuit", artist="Nova Lights", genre="Electronic",
                release_date=releases[0].release_date, track_number=1, duration="3:42",
                cat_number="CAT000001", platforms=releases[0].platforms, status="live",
            ),
            Track(
                user_id=user.id, release_id=releases[0].id, artist_id=artists[0].id,
                title="Neon Rain", artist="Nova Lights", genre="Electronic",
                release_date=releases[0].release_date, track_number=2, duration="4:05",
                cat_number="CAT000002", platforms=releases[0].platforms, status="live",
            ),
            Track(
                user_id=user.id, release_id=releases[1].id, artist_id=artists[1].id,
                title="Slow Weather", artist="The Quiet Hours", genre="Indie",
                release_date=releases[1].release_date, track_number=1, duration="3:18",
                cat_number="CAT000003", platforms=releases[1].platforms, status="processing",
            ),
        ]
        session.add_all(tracks)
        await session.flush()

        # Daily analytics for the live tracks over the last 90 days
        records = []
        for offset in range(90):
            day = today - timedelta(days=offset)
            for index, track in enumerate(tracks[:2]):
                for platform, (plays, revenue) in PLATFORM_PLAYS.items():
                    scale = 1 + (offset % 7) / 10
                    records.append(AnalyticsRecord(
                        user_id=user.id,
                        track_id=track.id,
                        date=day,
                        platform=platform,
                        country=COUNTRIES[(offset + index) % len(COUNTRIES)],
                        plays=int(plays * scale),
                        revenue=round(revenue * scale, 2),
                    ))
        session.add_all(records)

        session.add_all([
            PaymentHistory(user_id=user.id, track_id=tracks[0].id, amount=125.50, platform="Spotify",
                           status="completed", reference="SPOT-2024-001"),
            PaymentHistory(user_id=user.id, track_id=tracks[1].id, amount=89.25, platform="Apple Music",
                           status="completed", reference="APPL-2024-001"),
            PaymentHistory(user_id=user.id, amount=45.00, platform="YouTube Music",
                           status="pending", reference="YTM-2024-001"),
        ])

        session.add_all([
            RoyaltyAdvance(
                user_id=user.id,
                amount=5000.0,
                advance_date=date(2024, 1, 15),
                description="Q1 2024 Royalty Advance",
                status="active",
                repayments=[
                    {"amount": 1000.0, "date": "2024-02-01", "payout_id": "po_123",
                     "description": "February earnings deduction"},
                    {"amount": 1500.0, "date": "2024-03-01", "payout_id": "po_124",
                     "description": "March earnings deduction"},
                ],
            ),
            RoyaltyAdvance(
                user_id=user.id,
                amount=2500.0,
                advance_date=date(2023, 10, 1),
                description="Q4 2023 Royalty Advance",
                status="repaid",
                repayments=[
                    {"amount": 2500.0, "date": "2023-12-01", "payout_id": "po_101",
                     "description": "Q4 earnings deduction"},
                ],
            ),
        ])

        # Commit all changes
        await session.commit()
        print(f"✅ Demo data created! Log in as {DEMO_EMAIL} / {DEMO_PASSWORD}")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_demo_data())
