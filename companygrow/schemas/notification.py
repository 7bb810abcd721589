from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class NotificationCreate(BaseModel):
    user_ids: List[int] = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    type: Optional[str] = Field(default="system", max_length=50)
    action_url: Optional[str] = Field(default=None, max_length=500)


class NotificationOut(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: Optional[str] = None
    is_read: bool
    action_url: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
