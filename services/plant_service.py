from typing import List

from tortoise.transactions import in_transaction

from core.exceptions import AuthorizationError, NotFoundError
from core.logger import db_logger
from models.care import CareHistory, CareTask
from models.health import PlantHealthMetric
from models.plant import Plant
from models.recommendation import Recommendation
from models.species import SpeciesProfile
from models.user import User
from schemas.plant import PlantCreate, PlantUpdate
from services.care_tasks import CareTaskService
from services.health_calculator import HealthCalculator

HEALTH_FIELDS = {"last_watered", "water_frequency_days", "light_requirement"}


def _plant_fields(data: dict) -> dict:
    if data.get("image_url") is not None:
        data["image_url"] = str(data["image_url"])
    return data


class PlantService:

    @staticmethod
    async def list_for_user(user: User) -> List[Plant]:
        return await Plant.filter(user=user).order_by("id")

    @staticmethod
    async def get_owned(plant_id: int, user: User) -> Plant:
        plant = await Plant.get_or_none(id=plant_id)
        if plant is None:
            raise NotFoundError("Plant", plant_id)
        if plant.user_id != user.id:
            raise AuthorizationError()
        return plant

    @staticmethod
    async def create(user: User, data: PlantCreate) -> Plant:
        fields = _plant_fields(data.model_dump())
        async with in_transaction():
            plant = await Plant.create(user=user, **fields)
            await CareTaskService.create_initial_watering(plant)
            await HealthCalculator.recompute(plant.id)

        db_logger.log_create("Plant", {"id": plant.id, "user_id": user.id, **fields})
        return plant

    @staticmethod
    async def update(plant: Plant, data: PlantUpdate) -> Plant:
        changes = _plant_fields(data.model_dump(exclude_unset=True))
        for required in ("name", "status"):
            if required in changes and changes[required] is None:
                del changes[required]
        if not changes:
            return plant

        plant.update_from_dict(changes)
        async with in_transaction():
            await plant.save(update_fields=list(changes))
            if HEALTH_FIELDS & changes.keys():
                await HealthCalculator.recompute(plant.id)

        db_logger.log_update("Plant", plant.id, changes)
        return plant

    @staticmethod
    async def delete(plant: Plant):
        """Delete a plant and every row that references it."""
        plant_id = plant.id
        async with in_transaction():
            await CareTask.filter(plant_id=plant_id).delete()
            await CareHistory.filter(plant_id=plant_id).delete()
            await Recommendation.filter(plant_id=plant_id).delete()
            await PlantHealthMetric.filter(plant_id=plant_id).delete()
            await SpeciesProfile.filter(plant_id=plant_id).delete()
            await plant.delete()

        db_logger.log_delete("Plant", plant_id)

    @staticmethod
    async def history(plant: Plant) -> List[CareHistory]:
        return await CareHistory.filter(plant_id=plant.id).order_by("-performed_at", "-id")
