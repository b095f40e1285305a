from dataclasses import dataclass
from datetime import datetime

from core.clock import days_between, utc_now
from core.logger import db_logger
from models.health import PlantHealthMetric
from models.plant import LightRequirement, Plant

LIGHT_LEVEL_BY_REQUIREMENT = {
    LightRequirement.LOW: 90,
    LightRequirement.MEDIUM: 75,
    LightRequirement.HIGH: 60,
}
DEFAULT_LIGHT_LEVEL = 75


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, value)))


@dataclass(frozen=True)
class HealthLevels:
    water_level: int
    light_level: int
    overall_health: int


def water_level(last_watered: datetime | None, frequency_days: int | None, now: datetime) -> int:
    if last_watered is None or not frequency_days:
        return 100
    elapsed = days_between(last_watered, now)
    return clamp(round(100 - (elapsed / frequency_days) * 100))


def light_level(requirement: LightRequirement | str | None) -> int:
    if requirement is None:
        return DEFAULT_LIGHT_LEVEL
    return LIGHT_LEVEL_BY_REQUIREMENT.get(LightRequirement(requirement), DEFAULT_LIGHT_LEVEL)


def compute_levels(plant: Plant, now: datetime | None = None) -> HealthLevels:
    now = now or utc_now()
    water = water_level(plant.last_watered, plant.water_frequency_days, now)
    light = light_level(plant.light_requirement)
    return HealthLevels(
        water_level=water,
        light_level=light,
        overall_health=clamp(round((water + light) / 2)),
    )


class HealthCalculator:

    @staticmethod
    async def recompute(plant_id: int, now: datetime | None = None) -> PlantHealthMetric | None:
        """Upsert the health metric of a plant. None when the plant does not exist."""
        plant = await Plant.get_or_none(id=plant_id)
        if plant is None:
            return None

        levels = compute_levels(plant, now)
        metric, created = await PlantHealthMetric.update_or_create(
            defaults={
                "water_level": levels.water_level,
                "light_level": levels.light_level,
                "overall_health": levels.overall_health,
            },
            plant_id=plant_id,
        )

        data = {
            "plant_id": plant_id,
            "water_level": levels.water_level,
            "light_level": levels.light_level,
            "overall_health": levels.overall_health,
        }
        if created:
            db_logger.log_create("PlantHealthMetric", data)
        else:
            db_logger.log_update("PlantHealthMetric", metric.id, data)
        return metric

    @staticmethod
    async def get(plant_id: int) -> PlantHealthMetric | None:
        return await PlantHealthMetric.get_or_none(plant_id=plant_id)
