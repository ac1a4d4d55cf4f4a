from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Literal
from uuid import UUID
from datetime import datetime

UserRole = Literal["artist", "label", "contributor"]

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)  # Raw password, will be hashed before storage
    name: str = Field(min_length=1)
    role: UserRole = "artist"

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class ProfileUpdate(BaseModel):
    # Balances are deliberately absent; only the server moves money.
    name: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[dict] = None
    role: Optional[UserRole] = None

class OnboardingData(BaseModel):
    artist_name: Optional[str] = None
    company_name: Optional[str] = None
    company_type: Optional[str] = None
    experience_level: Optional[str] = None
    genre_preferences: List[str] = []
    goals: List[str] = []
    preferred_platforms: List[str] = []
    primary_market: Optional[str] = None
    team_size: Optional[int] = None
    monthly_release_goal: Optional[int] = None
    has_existing_catalog: Optional[bool] = None
    marketing_budget_range: Optional[str] = None
    collaboration_interests: List[str] = []
    onboarding_step: Optional[int] = None

class UserPasswordUpdate(BaseModel):
    old_password: str
    new_password: str = Field(min_length=6)

class ProfileResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[dict] = None

    total_earnings: float = 0.0
    available_balance: float = 0.0
    pending_payments: float = 0.0

    onboarding_completed: bool = False
    onboarding_completed_at: Optional[datetime] = None
    onboarding_step: Optional[int] = None
    artist_name: Optional[str] = None
    company_name: Optional[str] = None
    company_type: Optional[str] = None
    experience_level: Optional[str] = None
    genre_preferences: Optional[List[str]] = None
    goals: Optional[List[str]] = None
    preferred_platforms: Optional[List[str]] = None
    primary_market: Optional[str] = None
    team_size: Optional[int] = None
    monthly_release_goal: Optional[int] = None
    has_existing_catalog: Optional[bool] = None
    marketing_budget_range: Optional[str] = None
    collaboration_interests: Optional[List[str]] = None

    spotify_connected: bool = False
    spotify_connected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
