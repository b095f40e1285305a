from fastapi import APIRouter, Depends, Query

from api.deps import get_current_user
from models.care import CareHistory
from models.user import User
from schemas.history import ActivityLogEntry, ActivityLogResponse

router = APIRouter(prefix="/api", tags=["History"])


@router.get("/history", response_model=ActivityLogResponse)
async def get_activity_log(
        limit: int = Query(100, ge=1, le=500),
        current_user: User = Depends(get_current_user)
):
    entries = await CareHistory.filter(
        plant__user_id=current_user.id
    ).order_by("-performed_at", "-id").limit(limit).prefetch_related("plant")

    logs = []
    for entry in entries:
        plant = entry.plant
        logs.append(ActivityLogEntry(
            id=entry.id,
            plant_id=plant.id,
            plant_name=plant.name,
            plant_image=plant.image_url,
            action_type=entry.action_type,
            action_time=entry.performed_at,
            notes=entry.notes,
            date_added=plant.acquired_date,
            last_watered=plant.last_watered,
        ))

    return ActivityLogResponse(logs=logs)
