from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from core.clock import add_days, as_utc, utc_now
from core.config import settings
from models.care import CareHistory, CareTask
from models.health import PlantHealthMetric
from models.plant import Plant
from services.care_tasks import CareTaskService


def health_status(average: Optional[float]) -> Optional[str]:
    if average is None:
        return None
    if average < 50:
        return "Poor"
    if average < 75:
        return "Fair"
    return "Good"


def needs_water(plant: Plant, now: datetime, grace_days: float = 0) -> bool:
    if plant.last_watered is None or not plant.water_frequency_days:
        return False
    return as_utc(now) > add_days(plant.last_watered, plant.water_frequency_days + grace_days)


@dataclass
class DashboardSnapshot:
    total_plants: int
    plants_needing_water: int
    upcoming_tasks: List[CareTask] = field(default_factory=list)
    recent_activity: List[CareHistory] = field(default_factory=list)
    average_health: Optional[int] = None
    health_status: Optional[str] = None


class DashboardAggregator:
    """Read-only summary of a user's plants, tasks and activity."""

    def __init__(self, grace_days: float = settings.WATER_GRACE_DAYS, limit: int = settings.DASHBOARD_LIST_LIMIT):
        self.grace_days = grace_days
        self.limit = limit

    async def stats(self, user_id: int, now: datetime | None = None) -> DashboardSnapshot:
        now = now or utc_now()

        plants = await Plant.filter(user_id=user_id)
        needing_water = sum(1 for p in plants if needs_water(p, now, self.grace_days))

        upcoming = await CareTaskService.list_upcoming(user_id, self.limit, now)

        recent = await CareHistory.filter(
            plant__user_id=user_id
        ).order_by("-performed_at", "-id").limit(self.limit).prefetch_related("plant")

        scores = await PlantHealthMetric.filter(plant__user_id=user_id).values_list("overall_health", flat=True)
        mean = sum(scores) / len(scores) if scores else None

        return DashboardSnapshot(
            total_plants=len(plants),
            plants_needing_water=needing_water,
            upcoming_tasks=list(upcoming),
            recent_activity=list(recent),
            average_health=round(mean) if mean is not None else None,
            health_status=health_status(mean),
        )
