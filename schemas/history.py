from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class ActivityLogEntry(BaseModel):
    id: int
    plant_id: int
    plant_name: str
    plant_image: Optional[str] = None
    action_type: str
    action_time: datetime
    notes: Optional[str] = None
    date_added: Optional[datetime] = None
    last_watered: Optional[datetime] = None


class ActivityLogResponse(BaseModel):
    logs: List[ActivityLogEntry]
