import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid

from onesync.services.database import Base, utcnow

class Artist(Base):
    __tablename__ = "artists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    display_name = Column(String(255))
    bio = Column(Text)
    website = Column(String(500))
    email = Column(String(255))
    phone = Column(String(50))

    # Profile links
    spotify_url = Column(String(500))
    apple_music_url = Column(String(500))
    youtube_url = Column(String(500))
    instagram_url = Column(String(500))
    twitter_url = Column(String(500))
    facebook_url = Column(String(500))
    soundcloud_url = Column(String(500))
    bandcamp_url = Column(String(500))

    genre = Column(String(100))
    sub_genre = Column(String(100))
    record_label = Column(String(255))
    management_company = Column(String(255))
    booking_agent = Column(String(255))
    avatar_url = Column(Text)

    # Deleting an artist only flips is_active
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_artists_user_name"),
    )
