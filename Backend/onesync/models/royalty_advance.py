import uuid
import datetime
from sqlalchemy import String, Text, Float, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from onesync.services.database import Base, JSONType, utcnow


class RoyaltyAdvance(Base):
    __tablename__ = "royalty_advances"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    amount: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    advance_date: Mapped[datetime.date] = mapped_column(Date)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="active")

    # List of {amount, date, payout_id, description}, recouped from earnings
    repayments: Mapped[list | None] = mapped_column(JSONType, default=list)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def repaid_amount(self) -> float:
        return sum(float(r.get("amount", 0)) for r in (self.repayments or []))

    @property
    def remaining_balance(self) -> float:
        return max(self.amount - self.repaid_amount, 0.0)
