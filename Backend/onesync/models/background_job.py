import enum
import uuid
import datetime
from sqlalchemy import String, ForeignKey, DateTime, Float, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from onesync.services.database import Base, JSONType, utcnow

class JobStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

class BackgroundJob(Base):
    __tablename__ = "background_jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Generic fields for any type of job
    job_type: Mapped[str] = mapped_column(String(50), index=True)
    parameters: Mapped[dict | None] = mapped_column(JSONType)
    status: Mapped[str] = mapped_column(String(20), default=JobStatus.PENDING.value, index=True)

    # The user who requested the job.
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True)

    # Timestamps and performance tracking.
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    started_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    duration_s: Mapped[float | None] = mapped_column(Float)

    # Mastered file URLs on success, {"error": ...} on failure.
    result: Mapped[dict | None] = mapped_column(JSONType)
