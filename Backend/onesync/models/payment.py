import uuid
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, CheckConstraint, Uuid

from onesync.services.database import Base, utcnow

class PaymentHistory(Base):
    __tablename__ = "payment_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    track_id = Column(Uuid, ForeignKey("tracks.id", ondelete="SET NULL"), nullable=True)

    amount = Column(Float, nullable=False)
    platform = Column(String(100), nullable=False)
    status = Column(String(20), default="pending")
    reference = Column(String(255))

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('completed', 'pending', 'failed')",
            name="valid_payment_status"
        ),
    )
