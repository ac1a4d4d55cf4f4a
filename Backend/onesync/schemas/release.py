from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from uuid import UUID
from datetime import date, datetime
from .track import TrackResponse   # Import track schema

ReleaseType = Literal["Single", "EP", "Album"]

class ReleaseMetadataUpdate(BaseModel):
    """Editable release metadata. Only the fields sent are written."""
    title: Optional[str] = None
    primary_artist: Optional[str] = None
    display_artist: Optional[str] = None
    featured_artist: Optional[str] = None
    release_type: Optional[ReleaseType] = None
    main_genre: Optional[str] = None
    sub_genre: Optional[str] = None
    release_date: Optional[date] = None
    original_release_date: Optional[date] = None
    description: Optional[str] = None
    label: Optional[str] = None
    upc: Optional[str] = None
    countries: Optional[List[str]] = None
    is_worldwide: Optional[bool] = None
    copyrights: Optional[str] = None
    release_notes: Optional[str] = None
    retailers: Optional[List[str]] = None
    exclusive_for: Optional[str] = None
    allow_preorder_itunes: Optional[bool] = None
    platforms: Optional[List[str]] = None

class TrackUploadItem(BaseModel):
    title: str = Field(min_length=1)
    isrc: Optional[str] = None
    duration: Optional[str] = None
    is_explicit: bool = False
    album_only: bool = False
    mix_version: Optional[str] = None
    remixer: Optional[str] = None
    publisher: Optional[str] = None
    composer: Optional[str] = None
    lyricist: Optional[str] = None
    contributors: List[str] = []
    track_display_artist: Optional[str] = None
    track_featured_artist: Optional[str] = None
    price_tiers: Optional[str] = None
    description: Optional[str] = None

class ReleaseUploadMetadata(BaseModel):
    """The `metadata` part of a release upload."""
    title: str = Field(min_length=1)
    release_type: ReleaseType = "Single"
    primary_artist: str = Field(min_length=1)
    display_artist: Optional[str] = None
    featured_artist: Optional[str] = None
    artist_id: Optional[UUID] = None
    label: Optional[str] = None
    cat_number: Optional[str] = None
    main_genre: str = Field(min_length=1)
    sub_genre: Optional[str] = None
    upc: Optional[str] = None
    release_date: date
    original_release_date: Optional[date] = None
    countries: List[str] = []
    is_worldwide: bool = True
    platforms: List[str] = []
    retailers: List[str] = []
    description: Optional[str] = None
    copyrights: Optional[str] = None
    release_notes: Optional[str] = None
    exclusive_for: Optional[str] = None
    allow_preorder_itunes: bool = False
    tracks: List[TrackUploadItem] = Field(min_length=1)

class ReleaseResponse(BaseModel):
    id: UUID
    user_id: UUID
    artist_id: Optional[UUID] = None
    title: str
    release_type: str
    primary_artist: str
    display_artist: Optional[str] = None
    featured_artist: Optional[str] = None
    label: Optional[str] = None
    cat_number: Optional[str] = None
    main_genre: str
    sub_genre: Optional[str] = None
    upc: Optional[str] = None
    release_date: date
    original_release_date: Optional[date] = None
    countries: Optional[List[str]] = None
    is_worldwide: Optional[bool] = None
    platforms: Optional[List[str]] = None
    retailers: Optional[List[str]] = None
    description: Optional[str] = None
    copyrights: Optional[str] = None
    release_notes: Optional[str] = None
    artwork_url: Optional[str] = None
    artwork_name: Optional[str] = None
    exclusive_for: Optional[str] = None
    allow_preorder_itunes: Optional[bool] = None
    total_plays: int = 0
    total_revenue: float = 0.0
    track_count: int = 0
    status: str
    created_at: datetime
    updated_at: datetime

    # These will automatically include the nested objects in the API response
    tracks: List[TrackResponse] = []

    model_config = ConfigDict(from_attributes=True)

class ReleaseUploadResponse(BaseModel):
    release: ReleaseResponse
    support_ticket_id: Optional[str] = None

class FtpUploadRequest(BaseModel):
    filename: str = "release.csv"

class FtpUploadResponse(BaseModel):
    success: bool
    message: str
    filename: str
