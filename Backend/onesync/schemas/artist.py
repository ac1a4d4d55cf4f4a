from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

class ArtistFields(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    spotify_url: Optional[str] = None
    apple_music_url: Optional[str] = None
    youtube_url: Optional[str] = None
    instagram_url: Optional[str] = None
    twitter_url: Optional[str] = None
    facebook_url: Optional[str] = None
    soundcloud_url: Optional[str] = None
    bandcamp_url: Optional[str] = None
    genre: Optional[str] = None
    sub_genre: Optional[str] = None
    record_label: Optional[str] = None
    management_company: Optional[str] = None
    booking_agent: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        # The form posts "" for untouched inputs; store those as NULL
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

class ArtistCreate(ArtistFields):
    name: Optional[str] = None

class ArtistUpdate(ArtistFields):
    name: Optional[str] = None

class ArtistResponse(ArtistFields):
    id: UUID
    user_id: UUID
    name: str
    is_active: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
