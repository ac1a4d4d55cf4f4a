from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime

class TrackResponse(BaseModel):
    id: UUID
    user_id: UUID
    release_id: Optional[UUID] = None
    artist_id: Optional[UUID] = None
    title: str
    artist: str
    genre: str
    release_date: date
    track_number: Optional[int] = None
    duration: Optional[str] = None
    isrc: Optional[str] = None
    cat_number: Optional[str] = None
    description: Optional[str] = None
    is_explicit: bool = False
    album_only: bool = False
    mix_version: Optional[str] = None
    remixer: Optional[str] = None
    publisher: Optional[str] = None
    composer: Optional[str] = None
    lyricist: Optional[str] = None
    contributors: Optional[List[str]] = None
    track_display_artist: Optional[str] = None
    track_featured_artist: Optional[str] = None
    price_tiers: Optional[str] = None
    audio_file_url: Optional[str] = None
    audio_file_urls: Optional[List[str]] = None
    artwork_url: Optional[str] = None
    platforms: Optional[List[str]] = None
    plays: int = 0
    revenue: float = 0.0
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
