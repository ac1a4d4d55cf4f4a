import uuid
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, ForeignKey, Uuid

from onesync.services.database import Base, utcnow

class AnalyticsRecord(Base):
    __tablename__ = "analytics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    track_id = Column(Uuid, ForeignKey("tracks.id", ondelete="SET NULL"), nullable=True, index=True)

    date = Column(Date, nullable=False, index=True)
    platform = Column(String(100))
    country = Column(String(100))
    plays = Column(Integer, default=0)
    revenue = Column(Float, default=0.0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
