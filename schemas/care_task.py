from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from models.care import TaskType


class CareTaskCreate(BaseModel):
    plant_id: int
    task_type: TaskType
    due_date: datetime


class CareTaskOut(BaseModel):
    id: int
    plant_id: int
    task_type: TaskType
    due_date: datetime
    completed: bool
    completed_date: Optional[datetime] = None
    skipped: bool
    plant_name: Optional[str] = None

    class Config:
        from_attributes = True


class CareHistoryOut(BaseModel):
    id: int
    plant_id: int
    action_type: str
    notes: Optional[str] = None
    performed_at: datetime
    plant_name: Optional[str] = None

    class Config:
        from_attributes = True


def task_out(task, plant_name: Optional[str] = None) -> CareTaskOut:
    out = CareTaskOut.model_validate(task)
    out.plant_name = plant_name
    return out


def history_out(entry, plant_name: Optional[str] = None) -> CareHistoryOut:
    out = CareHistoryOut.model_validate(entry)
    out.plant_name = plant_name
    return out
