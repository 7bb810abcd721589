from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class SettingIn(BaseModel):
    setting_value: Optional[str] = None
    description: Optional[str] = None


class SettingOut(BaseModel):
    id: int
    setting_key: str
    setting_value: Optional[str] = None
    description: Optional[str] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
