from fastapi import APIRouter, Depends, status

from api.deps import get_current_user
from core.logger import db_logger
from models.environment import EnvironmentReading
from models.user import User
from schemas.environment import EnvironmentReadingCreate, EnvironmentReadingOut, WeatherOut
from services.recommendations import RecommendationService, ThresholdStrategy
from services.weather import WeatherClient, get_weather_client

router = APIRouter(prefix="/api", tags=["Environment"])


@router.get("/environment")
async def get_latest_reading(current_user: User = Depends(get_current_user)):
    reading = await RecommendationService.latest_reading(current_user.id)
    if reading is None:
        return {}
    return EnvironmentReadingOut.model_validate(reading)


@router.post("/environment", response_model=EnvironmentReadingOut, status_code=status.HTTP_201_CREATED)
async def add_reading(
        payload: EnvironmentReadingCreate,
        current_user: User = Depends(get_current_user)
):
    reading = await EnvironmentReading.create(user=current_user, **payload.model_dump())
    db_logger.log_create("EnvironmentReading", {"id": reading.id, "user_id": current_user.id})

    # a new reading refreshes the rule based recommendations
    await RecommendationService.generate_for_user(current_user.id, ThresholdStrategy())
    return reading


@router.get("/weather", response_model=WeatherOut)
async def get_weather(
        latitude: float | None = None,
        longitude: float | None = None,
        current_user: User = Depends(get_current_user),
        weather_client: WeatherClient = Depends(get_weather_client),
):
    weather = await weather_client.current(latitude, longitude)
    return WeatherOut(**weather.to_dict())
