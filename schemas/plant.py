from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, AnyHttpUrl

from models.plant import MAX_WATER_FREQUENCY_DAYS, LightRequirement, PlantStatus


class PlantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    species: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    image_url: Optional[AnyHttpUrl] = None
    acquired_date: Optional[datetime] = None
    status: PlantStatus = PlantStatus.HEALTHY
    last_watered: Optional[datetime] = None
    water_frequency_days: Optional[int] = Field(None, gt=0, le=MAX_WATER_FREQUENCY_DAYS)
    light_requirement: Optional[LightRequirement] = None


class PlantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    species: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    image_url: Optional[AnyHttpUrl] = None
    acquired_date: Optional[datetime] = None
    status: Optional[PlantStatus] = None
    last_watered: Optional[datetime] = None
    water_frequency_days: Optional[int] = Field(None, gt=0, le=MAX_WATER_FREQUENCY_DAYS)
    light_requirement: Optional[LightRequirement] = None


class PlantOut(BaseModel):
    id: int
    user_id: int
    name: str
    species: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    acquired_date: Optional[datetime] = None
    status: PlantStatus
    last_watered: Optional[datetime] = None
    water_frequency_days: Optional[int] = None
    light_requirement: Optional[LightRequirement] = None
    created_at: datetime

    class Config:
        from_attributes = True


class HealthMetricOut(BaseModel):
    id: int
    plant_id: int
    water_level: int
    light_level: int
    overall_health: int
    updated_at: datetime

    class Config:
        from_attributes = True


class CareTipOut(BaseModel):
    category: str
    tip: str


class SpeciesDetailsOut(BaseModel):
    plant_id: int
    external_id: Optional[int] = None
    query: str
    details: dict = {}
    synced_at: datetime
    stale: bool = False
