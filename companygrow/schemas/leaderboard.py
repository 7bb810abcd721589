from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Literal
from datetime import date, datetime

from companygrow.schemas.user import UserBrief

AchievementType = Literal[
    "points_milestone", "course_completion", "project_completion", "streak", "ranking",
    "skill_count", "skill_mastery", "verified_skills", "badge_count",
]


class RankingRow(BaseModel):
    rank: int
    user: UserBrief
    points: int
    total_points: int
    courses_completed: int
    projects_completed: int
    badges_earned: int
    current_streak: int
    longest_streak: int


class AwardPointsIn(BaseModel):
    user_id: int
    points_earned: int = Field(ge=1, le=10000)
    points_type: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None


class SeasonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_active: bool = False
    prize_description: Optional[str] = None

    @model_validator(mode="after")
    def date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class SeasonOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_active: bool
    prize_description: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AchievementCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    achievement_type: AchievementType
    criteria_value: int = Field(ge=0)
    badge_image: Optional[str] = Field(default=None, max_length=500)
    points_reward: int = Field(default=0, ge=0)
    is_active: bool = True


class AchievementOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    achievement_type: Optional[str] = None
    criteria_value: Optional[int] = None
    badge_image: Optional[str] = None
    points_reward: int
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class UnlockedAchievementOut(AchievementOut):
    unlocked_at: Optional[datetime] = None
