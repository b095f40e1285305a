from typing import List, Optional

from pydantic import BaseModel

from schemas.care_task import CareHistoryOut, CareTaskOut


class DashboardStats(BaseModel):
    total_plants: int
    plants_needing_water: int
    upcoming_tasks: List[CareTaskOut]
    recent_activity: List[CareHistoryOut]
    average_health: Optional[int] = None
    health_status: Optional[str] = None


class GeneralTipOut(BaseModel):
    tip: str
    season: str
