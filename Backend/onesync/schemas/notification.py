from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime

class Notification(BaseModel):
    id: str
    type: Literal["success", "info", "warning", "error"]
    title: str
    message: str
    created_at: datetime
    read: bool = False
    action_url: Optional[str] = None

class NotificationList(BaseModel):
    notifications: List[Notification]
    unread_count: int
