from fastapi import APIRouter, Depends

from api.deps import get_current_user
from core.clock import utc_now
from models.user import User
from schemas.care_task import history_out, task_out
from schemas.dashboard import DashboardStats, GeneralTipOut
from services.care_tips import CareTipService, season_for
from services.dashboard import DashboardAggregator
from services.text_generator import TextGenerator, get_text_generator
from services.weather import WeatherClient, get_weather_client

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(current_user: User = Depends(get_current_user)):
    snapshot = await DashboardAggregator().stats(current_user.id)
    return DashboardStats(
        total_plants=snapshot.total_plants,
        plants_needing_water=snapshot.plants_needing_water,
        upcoming_tasks=[task_out(task, task.plant.name) for task in snapshot.upcoming_tasks],
        recent_activity=[history_out(entry, entry.plant.name) for entry in snapshot.recent_activity],
        average_health=snapshot.average_health,
        health_status=snapshot.health_status,
    )


@router.get("/ai-general-tip", response_model=GeneralTipOut)
async def get_general_tip(
        latitude: float | None = None,
        longitude: float | None = None,
        current_user: User = Depends(get_current_user),
        weather_client: WeatherClient = Depends(get_weather_client),
        generator: TextGenerator = Depends(get_text_generator),
):
    weather = await weather_client.current(latitude, longitude)
    season = season_for(utc_now())
    tip = await CareTipService(generator).general_tip(weather, season)
    return GeneralTipOut(tip=tip, season=season)
