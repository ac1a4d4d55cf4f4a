import uuid
from sqlalchemy import Column, String, Text, Boolean, Integer, Float, Date, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from onesync.services.database import Base, JSONType, utcnow

RELEASE_STATUSES = ("draft", "pending", "processing", "live", "failed", "rejected")
RELEASE_TYPES = ("Single", "EP", "Album")

class Release(Base):
    __tablename__ = "releases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    artist_id = Column(Uuid, ForeignKey("artists.id"), nullable=True)

    title = Column(String(500), nullable=False)
    release_type = Column(String(20), nullable=False, default="Single")
    primary_artist = Column(String(255), nullable=False)
    display_artist = Column(String(255))
    featured_artist = Column(String(255))
    label = Column(String(255))
    cat_number = Column(String(50), unique=True)
    main_genre = Column(String(100), nullable=False)
    sub_genre = Column(String(100))
    upc = Column(String(50))
    release_date = Column(Date, nullable=False)
    original_release_date = Column(Date)

    countries = Column(JSONType, default=list)
    is_worldwide = Column(Boolean, default=True)
    platforms = Column(JSONType, default=list)
    retailers = Column(JSONType, default=list)

    description = Column(Text)
    copyrights = Column(String(500))
    release_notes = Column(Text)
    artwork_url = Column(Text)
    artwork_name = Column(String(255))
    exclusive_for = Column(String(255))
    allow_preorder_itunes = Column(Boolean, default=False)

    total_plays = Column(Integer, default=0)
    total_revenue = Column(Float, default=0.0)
    track_count = Column(Integer, default=0)
    status = Column(String(20), default="pending", index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # A release has many tracks, ordered as they appear on the release
    tracks = relationship(
        "Track",
        back_populates="release",
        cascade="all, delete-orphan",
        order_by="Track.track_number",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending', 'processing', 'live', 'failed', 'rejected')",
            name="valid_release_status"
        ),
    )
