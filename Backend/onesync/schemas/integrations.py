from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

class ActionRequest(BaseModel):
    """`{action, ...params}` body shared by the aggregator proxies."""
    action: str

    model_config = ConfigDict(extra="allow")

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

class ProxyResponse(BaseModel):
    success: bool = True
    data: Any = None

class SpotifyAuthorizeResponse(BaseModel):
    authorize_url: str
    state: str

class SpotifyCallback(BaseModel):
    code: str = Field(min_length=1)
    state: str = Field(min_length=1)

class SpotifyStatus(BaseModel):
    connected: bool
    connected_at: Optional[datetime] = None

class TrolleyRecipientCreate(BaseModel):
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None

class TrolleyPayoutItem(BaseModel):
    recipientId: str
    amount: Union[int, float, str]
    currency: Optional[str] = None
    memo: Optional[str] = None

class TrolleyBatchCreate(BaseModel):
    payouts: List[TrolleyPayoutItem] = []

class SupportTicketRequest(BaseModel):
    release_data: Dict[str, Any]

class SupportTicketResult(BaseModel):
    success: bool
    message: str
    ticketId: Optional[str] = None

class UnreadCount(BaseModel):
    unread_count: int
    success: bool
    error: Optional[str] = None
