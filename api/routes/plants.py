from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import get_current_user, get_owned_plant
from core.clock import utc_now
from models.plant import Plant
from models.user import User
from schemas.care_task import CareHistoryOut, history_out
from schemas.plant import (
    CareTipOut,
    HealthMetricOut,
    PlantCreate,
    PlantOut,
    PlantUpdate,
    SpeciesDetailsOut,
)
from services.care_tips import CareTipService, season_for
from services.health_calculator import HealthCalculator
from services.plant_service import PlantService
from services.species import SpeciesService, get_species_service
from services.text_generator import TextGenerator, get_text_generator
from services.weather import WeatherClient, get_weather_client

router = APIRouter(prefix="/api/plants", tags=["Plants"])


@router.get("", response_model=List[PlantOut])
async def list_plants(current_user: User = Depends(get_current_user)):
    return await PlantService.list_for_user(current_user)


@router.post("", response_model=PlantOut, status_code=status.HTTP_201_CREATED)
async def create_plant(
        payload: PlantCreate,
        current_user: User = Depends(get_current_user)
):
    return await PlantService.create(current_user, payload)


@router.get("/{plant_id}", response_model=PlantOut)
async def get_plant(plant: Plant = Depends(get_owned_plant)):
    return plant


@router.put("/{plant_id}", response_model=PlantOut)
async def update_plant(
        payload: PlantUpdate,
        plant: Plant = Depends(get_owned_plant)
):
    return await PlantService.update(plant, payload)


@router.delete("/{plant_id}")
async def delete_plant(plant: Plant = Depends(get_owned_plant)):
    plant_id = plant.id
    await PlantService.delete(plant)
    return {"success": True, "id": plant_id}


@router.get("/{plant_id}/health", response_model=HealthMetricOut)
async def get_plant_health(plant: Plant = Depends(get_owned_plant)):
    metric = await HealthCalculator.get(plant.id)
    if metric is None:
        metric = await HealthCalculator.recompute(plant.id)
    return metric


@router.get("/{plant_id}/history", response_model=List[CareHistoryOut])
async def get_plant_history(plant: Plant = Depends(get_owned_plant)):
    entries = await PlantService.history(plant)
    return [history_out(entry, plant.name) for entry in entries]


@router.post("/{plant_id}/ai-care-tips", response_model=List[CareTipOut])
async def get_ai_care_tips(
        latitude: float | None = None,
        longitude: float | None = None,
        plant: Plant = Depends(get_owned_plant),
        weather_client: WeatherClient = Depends(get_weather_client),
        generator: TextGenerator = Depends(get_text_generator),
):
    # no weather, no tips: the failure surfaces as 503
    weather = await weather_client.current(latitude, longitude)
    return await CareTipService(generator).plant_tips(plant, weather, season_for(utc_now()))


@router.get("/{plant_id}/species", response_model=SpeciesDetailsOut)
async def get_species_details(
        plant: Plant = Depends(get_owned_plant),
        species_service: SpeciesService = Depends(get_species_service),
):
    lookup = await species_service.details_for(plant)
    profile = lookup.profile
    return SpeciesDetailsOut(
        plant_id=plant.id,
        external_id=profile.external_id,
        query=profile.query,
        details=profile.details or {},
        synced_at=profile.synced_at,
        stale=lookup.stale,
    )
