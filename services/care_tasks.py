from datetime import datetime
from typing import List, Optional

from tortoise.transactions import in_transaction

from core.clock import add_days, utc_now
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.logger import db_logger
from models.care import CareHistory, CareTask, TaskType
from models.plant import Plant
from services.health_calculator import HealthCalculator


def already_closed(task_id: int) -> ValidationError:
    return ValidationError("Care task is already completed or skipped", {"task_id": task_id})


class CareTaskService:
    """
    Recurring care tasks.

    A task is pending until it is completed or skipped; both transitions are
    terminal and are written as conditional updates (only a pending row is
    touched), so a second call never reaches the side effects.
    Completing a water task schedules the next one at completion time plus the
    plant's watering frequency.
    """

    @staticmethod
    async def create(plant: Plant, task_type: TaskType, due_date: datetime) -> CareTask:
        task = await CareTask.create(plant=plant, task_type=task_type, due_date=due_date)
        db_logger.log_create("CareTask", {
            "id": task.id,
            "plant_id": plant.id,
            "task_type": TaskType(task_type).value,
            "due_date": due_date,
        })
        return task

    @staticmethod
    async def create_initial_watering(plant: Plant) -> Optional[CareTask]:
        if not plant.water_frequency_days:
            return None
        start = plant.created_at or utc_now()
        return await CareTaskService.create(
            plant, TaskType.WATER, add_days(start, plant.water_frequency_days)
        )

    @staticmethod
    async def get_owned(task_id: int, user_id: int) -> CareTask:
        task = await CareTask.get_or_none(id=task_id).prefetch_related("plant")
        if task is None:
            raise NotFoundError("Care task", task_id)
        if task.plant.user_id != user_id:
            raise AuthorizationError()
        return task

    @staticmethod
    async def complete(task_id: int, user_id: int, now: datetime | None = None) -> CareTask:
        task = await CareTaskService.get_owned(task_id, user_id)
        if not task.is_pending:
            raise already_closed(task_id)
        completed_at = now or utc_now()

        async with in_transaction():
            updated = await CareTask.filter(
                id=task_id, completed=False, skipped=False
            ).update(completed=True, completed_date=completed_at)
            if not updated:
                raise already_closed(task_id)

            await CareHistory.create(
                plant_id=task.plant_id,
                action_type=f"completed_{TaskType(task.task_type).value}",
                notes=f"Completed {TaskType(task.task_type).value} task",
                performed_at=completed_at,
            )

            if task.task_type == TaskType.WATER:
                await CareTaskService._water_completed(task.plant, completed_at)

        db_logger.log_update("CareTask", task_id, {"completed": True, "completed_date": completed_at})
        task.completed = True
        task.completed_date = completed_at
        return task

    @staticmethod
    async def _water_completed(plant: Plant, completed_at: datetime):
        await Plant.filter(id=plant.id).update(last_watered=completed_at)
        if plant.water_frequency_days:
            await CareTaskService.create(
                plant,
                TaskType.WATER,
                add_days(completed_at, plant.water_frequency_days)
            )
        await HealthCalculator.recompute(plant.id, now=completed_at)

    @staticmethod
    async def skip(task_id: int, user_id: int) -> CareTask:
        # skipping closes this occurrence only; the next one is not scheduled
        task = await CareTaskService.get_owned(task_id, user_id)
        if not task.is_pending:
            raise already_closed(task_id)

        async with in_transaction():
            updated = await CareTask.filter(
                id=task_id, completed=False, skipped=False
            ).update(skipped=True)
            if not updated:
                raise already_closed(task_id)

            await CareHistory.create(
                plant_id=task.plant_id,
                action_type=f"skipped_{TaskType(task.task_type).value}",
                notes=f"Skipped {TaskType(task.task_type).value} task",
            )

        db_logger.log_update("CareTask", task_id, {"skipped": True})
        task.skipped = True
        return task

    @staticmethod
    async def list_for_user(user_id: int, include_closed: bool = False) -> List[CareTask]:
        query = CareTask.filter(plant__user_id=user_id)
        if not include_closed:
            query = query.filter(completed=False, skipped=False)
        return await query.order_by("due_date", "id").prefetch_related("plant")

    @staticmethod
    async def list_upcoming(user_id: int, limit: int, now: datetime | None = None) -> List[CareTask]:
        return await CareTask.filter(
            plant__user_id=user_id,
            completed=False,
            skipped=False,
            due_date__gte=now or utc_now(),
        ).order_by("due_date", "id").limit(limit).prefetch_related("plant")
