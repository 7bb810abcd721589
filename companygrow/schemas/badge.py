from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from datetime import datetime

Rarity = Literal["common", "uncommon", "rare", "epic", "legendary"]


class BadgeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    badge_type: Optional[str] = Field(default=None, max_length=50)
    criteria: Optional[str] = None
    badge_image: Optional[str] = Field(default=None, max_length=500)
    token_reward: int = Field(default=0, ge=0)
    rarity: Optional[Rarity] = "common"
    course_id: Optional[int] = None
    is_active: bool = True


class BadgeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    badge_type: Optional[str] = Field(default=None, max_length=50)
    criteria: Optional[str] = None
    badge_image: Optional[str] = Field(default=None, max_length=500)
    token_reward: Optional[int] = Field(default=None, ge=0)
    rarity: Optional[Rarity] = None
    course_id: Optional[int] = None
    is_active: Optional[bool] = None


class BadgeOut(BaseModel):
    id: int
    name: str
    description: str
    badge_type: Optional[str] = None
    criteria: Optional[str] = None
    badge_image: Optional[str] = None
    token_reward: int
    rarity: Optional[str] = None
    course_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class BadgeCatalogItem(BadgeOut):
    earned_count: int = 0
    rarity_pct: float = 0.0
    owned: Optional[bool] = None


class AwardIn(BaseModel):
    user_id: int
    badge_id: int
    notes: Optional[str] = None


class UserBadgeOut(BaseModel):
    id: int
    user_id: int
    badge_id: int
    earned_date: Optional[datetime] = None
    awarded_by: Optional[int] = None
    notes: Optional[str] = None
    badge: BadgeOut
    model_config = ConfigDict(from_attributes=True)
