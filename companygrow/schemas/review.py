from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Literal
from datetime import datetime

from companygrow.schemas.user import UserBrief

Rating = Optional[int]


class ReviewFields(BaseModel):
    review_period_start: Optional[datetime] = None
    review_period_end: Optional[datetime] = None
    overall_rating: Rating = Field(default=None, ge=1, le=5)
    technical_skills_rating: Rating = Field(default=None, ge=1, le=5)
    communication_rating: Rating = Field(default=None, ge=1, le=5)
    teamwork_rating: Rating = Field(default=None, ge=1, le=5)
    leadership_rating: Rating = Field(default=None, ge=1, le=5)
    achievements: Optional[str] = None
    areas_for_improvement: Optional[str] = None
    goals_next_period: Optional[str] = None
    reviewer_comments: Optional[str] = None

    @model_validator(mode="after")
    def period_order(self):
        s, e = self.review_period_start, self.review_period_end
        if s is not None and e is not None and e < s:
            raise ValueError("review_period_end must not precede review_period_start")
        return self


class ReviewCreate(ReviewFields):
    employee_id: int


class ReviewUpdate(ReviewFields):
    employee_comments: Optional[str] = None


class ReviewStatusIn(BaseModel):
    status: Literal["draft", "submitted", "approved"]


class ReviewOut(BaseModel):
    id: int
    employee_id: int
    reviewer_id: Optional[int] = None
    review_period_start: Optional[datetime] = None
    review_period_end: Optional[datetime] = None
    overall_rating: Optional[int] = None
    technical_skills_rating: Optional[int] = None
    communication_rating: Optional[int] = None
    teamwork_rating: Optional[int] = None
    leadership_rating: Optional[int] = None
    achievements: Optional[str] = None
    areas_for_improvement: Optional[str] = None
    goals_next_period: Optional[str] = None
    reviewer_comments: Optional[str] = None
    employee_comments: Optional[str] = None
    status: str
    employee: Optional[UserBrief] = None
    reviewer: Optional[UserBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
