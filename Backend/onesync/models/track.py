import uuid
from sqlalchemy import Column, String, Text, Boolean, Integer, Float, Date, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from onesync.services.database import Base, JSONType, utcnow

TRACK_STATUSES = ("pending", "processing", "live", "failed")

class Track(Base):
    __tablename__ = "tracks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    artist_id = Column(Uuid, ForeignKey("artists.id"), nullable=True)

    title = Column(String(500), nullable=False)
    artist = Column(String(255), nullable=False)
    genre = Column(String(100), nullable=False)
    release_date = Column(Date, nullable=False)
    track_number = Column(Integer, default=1)
    duration = Column(String(20))
    isrc = Column(String(20))
    cat_number = Column(String(50), unique=True)
    description = Column(Text)

    is_explicit = Column(Boolean, default=False)
    album_only = Column(Boolean, default=False)
    mix_version = Column(String(255))
    remixer = Column(String(255))
    publisher = Column(String(255))
    composer = Column(String(255))
    lyricist = Column(String(255))
    contributors = Column(JSONType, default=list)
    track_display_artist = Column(String(255))
    track_featured_artist = Column(String(255))
    price_tiers = Column(String(50))

    audio_file_url = Column(Text)
    audio_file_urls = Column(JSONType, default=list)
    artwork_url = Column(Text)
    platforms = Column(JSONType, default=list)

    plays = Column(Integer, default=0)
    revenue = Column(Float, default=0.0)
    status = Column(String(20), default="pending", index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Link to its parent release
    release_id = Column(Uuid, ForeignKey("releases.id", ondelete="CASCADE"), nullable=True, index=True)
    release = relationship("Release", back_populates="tracks")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'processing', 'live', 'failed')",
            name="valid_track_status"
        ),
    )
