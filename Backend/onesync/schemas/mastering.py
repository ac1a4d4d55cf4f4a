from pydantic import BaseModel, Field
from typing import Literal

class MasteringSettings(BaseModel):
    style: Literal["balanced", "punchy", "warm", "bright"] = "balanced"
    intensity: Literal["light", "medium", "heavy"] = "medium"
    target_loudness: float = -14
    enhance_bass: bool = False
    enhance_highs: bool = False
    stereo_width: int = Field(default=100, ge=0, le=200)

class CostEstimateRequest(BaseModel):
    duration_minutes: float = Field(gt=0)
    settings: MasteringSettings = MasteringSettings()

class CostEstimate(BaseModel):
    estimated_cost: float
    currency: str = "USD"

class MasteringConfigStatus(BaseModel):
    is_configured: bool
    message: str
