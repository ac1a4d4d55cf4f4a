import uuid
import datetime
from sqlalchemy import String, Text, Boolean, Integer, Float, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from onesync.services.database import Base, JSONType, utcnow


class User(Base):
    """Auth account and profile in one row (the dashboard's user_profiles table)."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default="artist")

    avatar_url: Mapped[str | None] = mapped_column(Text)
    bio: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String(500))
    social_links: Mapped[dict | None] = mapped_column(JSONType)

    # Earnings balances are only ever written by the server.
    total_earnings: Mapped[float] = mapped_column(Float, default=0.0)
    available_balance: Mapped[float] = mapped_column(Float, default=0.0)
    pending_payments: Mapped[float] = mapped_column(Float, default=0.0)

    # Onboarding answers
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    onboarding_completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    onboarding_step: Mapped[int | None] = mapped_column(Integer)
    artist_name: Mapped[str | None] = mapped_column(String(255))
    company_name: Mapped[str | None] = mapped_column(String(255))
    company_type: Mapped[str | None] = mapped_column(String(100))
    experience_level: Mapped[str | None] = mapped_column(String(100))
    genre_preferences: Mapped[list | None] = mapped_column(JSONType)
    goals: Mapped[list | None] = mapped_column(JSONType)
    preferred_platforms: Mapped[list | None] = mapped_column(JSONType)
    primary_market: Mapped[str | None] = mapped_column(String(100))
    team_size: Mapped[int | None] = mapped_column(Integer)
    monthly_release_goal: Mapped[int | None] = mapped_column(Integer)
    has_existing_catalog: Mapped[bool | None] = mapped_column(Boolean)
    marketing_budget_range: Mapped[str | None] = mapped_column(String(100))
    collaboration_interests: Mapped[list | None] = mapped_column(JSONType)

    spotify_connected: Mapped[bool] = mapped_column(Boolean, default=False)
    spotify_connected_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
