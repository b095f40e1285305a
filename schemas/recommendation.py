from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from models.recommendation import RecommendationType


class StrategyName(str, Enum):
    THRESHOLD = "threshold"
    AI = "ai"


class GenerateRequest(BaseModel):
    strategy: StrategyName = StrategyName.THRESHOLD


class RecommendationOut(BaseModel):
    id: int
    plant_id: Optional[int] = None
    recommendation_type: RecommendationType
    message: str
    applied: bool
    created_at: datetime

    class Config:
        from_attributes = True


class GenerateResponse(BaseModel):
    success: bool
    message: str
    created: int
    count: int
    recommendations: List[RecommendationOut]
