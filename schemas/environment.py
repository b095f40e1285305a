from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.plant import LightRequirement


class EnvironmentReadingCreate(BaseModel):
    temperature: Optional[float] = Field(None, ge=-60, le=70)
    humidity: Optional[float] = Field(None, ge=0, le=100)
    light_level: Optional[LightRequirement] = None
    soil_moisture: Optional[float] = Field(None, ge=0)


class EnvironmentReadingOut(BaseModel):
    id: int
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    light_level: Optional[LightRequirement] = None
    soil_moisture: Optional[float] = None
    reading_timestamp: datetime

    class Config:
        from_attributes = True


class WeatherOut(BaseModel):
    latitude: float
    longitude: float
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    soil_moisture: Optional[float] = None
    observed_at: Optional[str] = None
