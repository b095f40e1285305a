from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import get_current_user
from models.user import User
from schemas.care_task import CareTaskCreate, CareTaskOut, task_out
from services.care_tasks import CareTaskService
from services.plant_service import PlantService

router = APIRouter(prefix="/api/care-tasks", tags=["Care Tasks"])


@router.get("", response_model=List[CareTaskOut])
async def list_care_tasks(
        include_closed: bool = False,
        current_user: User = Depends(get_current_user)
):
    tasks = await CareTaskService.list_for_user(current_user.id, include_closed=include_closed)
    return [task_out(task, task.plant.name) for task in tasks]


@router.post("", response_model=CareTaskOut, status_code=status.HTTP_201_CREATED)
async def create_care_task(
        payload: CareTaskCreate,
        current_user: User = Depends(get_current_user)
):
    plant = await PlantService.get_owned(payload.plant_id, current_user)
    task = await CareTaskService.create(plant, payload.task_type, payload.due_date)
    return task_out(task, plant.name)


@router.put("/{task_id}/complete", response_model=CareTaskOut)
async def complete_care_task(
        task_id: int,
        current_user: User = Depends(get_current_user)
):
    task = await CareTaskService.complete(task_id, current_user.id)
    return task_out(task, task.plant.name)


@router.put("/{task_id}/skip", response_model=CareTaskOut)
async def skip_care_task(
        task_id: int,
        current_user: User = Depends(get_current_user)
):
    task = await CareTaskService.skip(task_id, current_user.id)
    return task_out(task, task.plant.name)
