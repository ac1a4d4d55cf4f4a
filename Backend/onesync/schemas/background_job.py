from pydantic import BaseModel, ConfigDict
import uuid
from typing import Optional, Any
from datetime import datetime

from onesync.models.background_job import JobStatus

# Shared properties
class JobBase(BaseModel):
    job_type: str
    parameters: Optional[dict] = None

# Properties to receive on job creation
class JobCreate(JobBase):
    user_id: Optional[uuid.UUID] = None

# Properties to receive on job update
class JobUpdate(BaseModel):
    status: Optional[JobStatus] = None
    result: Optional[dict] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_s: Optional[float] = None

# Properties to return to client
class Job(JobBase):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    status: JobStatus
    result: Optional[Any] = None
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_s: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
