from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Literal
from uuid import UUID
from datetime import date, datetime

TimeRange = Literal["7d", "30d", "90d", "12m"]
Trend = Literal["up", "down"]

class AnalyticsRecordCreate(BaseModel):
    track_id: Optional[UUID] = None
    date: date
    platform: Optional[str] = None
    country: Optional[str] = None
    plays: int = Field(default=0, ge=0)
    revenue: float = Field(default=0.0, ge=0)

class AnalyticsRecordResponse(AnalyticsRecordCreate):
    id: UUID
    user_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PlayRevenue(BaseModel):
    plays: int = 0
    revenue: float = 0.0

class ConsolidatedAnalytics(BaseModel):
    platform_stats: Dict[str, PlayRevenue]
    geo_stats: Dict[str, PlayRevenue]
    total_plays: int
    total_revenue: float
    raw_data: List[AnalyticsRecordResponse]

class RevenueFigure(BaseModel):
    amount: float
    change: float
    trend: Trend

class RevenueSummary(BaseModel):
    total: RevenueFigure
    monthly: RevenueFigure
    weekly: RevenueFigure

class PlatformShare(BaseModel):
    name: str
    plays: int
    revenue: float
    percentage: int

class DashboardOverview(BaseModel):
    time_range: TimeRange
    revenue: RevenueSummary
    platforms: List[PlatformShare]
    total_plays: int
    plays_change: float
    live_tracks: int

class TopTrack(BaseModel):
    track_id: UUID
    title: str
    artist: str
    plays: int
    revenue: float

class EnhancedSales(BaseModel):
    total_revenue: float
    stripe_revenue: float
    platform_revenue: float
    total_transactions: int
    total_plays: int

class SyncResult(BaseModel):
    success: bool
    message: str
