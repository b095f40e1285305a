from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserOut(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    name: str
    created_at: datetime

    class Config:
        from_attributes = True
