from typing import List

from fastapi import APIRouter, Depends

from api.deps import get_current_user
from models.user import User
from schemas.recommendation import (
    GenerateRequest,
    GenerateResponse,
    RecommendationOut,
    StrategyName,
)
from services.recommendations import (
    GenerativeStrategy,
    RecommendationService,
    ThresholdStrategy,
)
from services.text_generator import TextGenerator, get_text_generator

router = APIRouter(prefix="/api/recommendations", tags=["Recommendations"])


@router.get("", response_model=List[RecommendationOut])
async def list_recommendations(
        include_applied: bool = False,
        current_user: User = Depends(get_current_user)
):
    return await RecommendationService.list_for_user(current_user.id, include_applied=include_applied)


@router.post("/generate", response_model=GenerateResponse)
async def generate_recommendations(
        payload: GenerateRequest | None = None,
        current_user: User = Depends(get_current_user),
        generator: TextGenerator = Depends(get_text_generator),
):
    payload = payload or GenerateRequest()
    if payload.strategy == StrategyName.AI:
        strategy = GenerativeStrategy(generator)
    else:
        strategy = ThresholdStrategy()

    created = await RecommendationService.generate_for_user(current_user.id, strategy)
    pending = await RecommendationService.list_for_user(current_user.id)

    return GenerateResponse(
        success=True,
        message=f"Generated {len(created)} new recommendations",
        created=len(created),
        count=len(pending),
        recommendations=[RecommendationOut.model_validate(r) for r in pending],
    )


@router.put("/{recommendation_id}/apply", response_model=RecommendationOut)
async def apply_recommendation(
        recommendation_id: int,
        current_user: User = Depends(get_current_user)
):
    return await RecommendationService.apply(recommendation_id, current_user.id)
