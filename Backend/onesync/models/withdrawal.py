import uuid
import datetime
from sqlalchemy import String, Text, Float, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from onesync.services.database import Base, utcnow

WITHDRAWAL_STATUSES = ("pending", "approved", "processing", "completed", "rejected")


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    amount: Mapped[float] = mapped_column(Float)
    payment_method: Mapped[str] = mapped_column(String(50))
    # Bank details are stored as a JSON string, PayPal as the email address
    account_details: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)

    # Provider references, filled in when an automated payout was started
    stripe_external_account_id: Mapped[str | None] = mapped_column(String(255))
    stripe_payout_id: Mapped[str | None] = mapped_column(String(255))
    trolley_recipient_id: Mapped[str | None] = mapped_column(String(255))
    trolley_payout_id: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
