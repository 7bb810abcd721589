from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Literal, List
from datetime import datetime

from companygrow.schemas.skill import SkillOut
from companygrow.schemas.user import UserBrief

ProjectStatus = Literal["planning", "active", "on_hold", "completed", "cancelled"]
Priority = Literal["low", "medium", "high", "critical"]


class ProjectBase(BaseModel):
    description: Optional[str] = None
    project_type: Optional[str] = Field(default=None, max_length=50)
    priority: Optional[Priority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(default=None, ge=0)
    actual_hours: Optional[int] = Field(default=None, ge=0)
    budget: Optional[float] = Field(default=None, ge=0)
    client_name: Optional[str] = Field(default=None, max_length=100)
    project_manager_id: Optional[int] = None


class ProjectCreate(ProjectBase):
    name: str = Field(min_length=1, max_length=200)
    status: ProjectStatus = "planning"


class ProjectUpdate(ProjectBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    status: Optional[ProjectStatus] = None


class ProjectOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    project_type: Optional[str] = None
    status: str
    priority: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    actual_hours: int = 0
    budget: Optional[float] = None
    client_name: Optional[str] = None
    project_manager_id: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AssignmentCreate(BaseModel):
    project_id: int
    user_id: int
    role: str = Field(default="Team Member", min_length=1, max_length=50)
    hours_allocated: int = Field(default=0, ge=0, le=1000)
    hourly_rate: float = Field(default=0, ge=0, le=1000)


class AssignmentUpdate(BaseModel):
    role: Optional[str] = Field(default=None, min_length=1, max_length=50)
    hours_allocated: Optional[int] = Field(default=None, ge=0, le=1000)
    hours_worked: Optional[int] = Field(default=None, ge=0, le=1000)
    hourly_rate: Optional[float] = Field(default=None, ge=0, le=1000)
    status: Optional[Literal["active", "completed", "removed"]] = None
    performance_rating: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = None


class AssignmentOut(BaseModel):
    id: int
    user_id: int
    project_id: int
    role: str
    assignment_date: Optional[datetime] = None
    hours_allocated: int
    hours_worked: int
    hourly_rate: float
    status: str
    performance_rating: Optional[int] = None
    feedback: Optional[str] = None
    user: Optional[UserBrief] = None
    project: Optional[ProjectOut] = None
    model_config = ConfigDict(from_attributes=True)


class ProjectSkillCreate(BaseModel):
    project_id: int
    skill_id: int
    required_level: int = Field(default=1, ge=1, le=5)
    is_mandatory: bool = True


class ProjectSkillUpdate(BaseModel):
    required_level: Optional[int] = Field(default=None, ge=1, le=5)
    is_mandatory: Optional[bool] = None

    @model_validator(mode="after")
    def not_empty(self):
        if self.required_level is None and self.is_mandatory is None:
            raise ValueError("required_level or is_mandatory is required")
        return self


class ProjectSkillOut(BaseModel):
    id: int
    project_id: int
    skill_id: int
    required_level: int
    is_mandatory: bool
    skill: Optional[SkillOut] = None
    model_config = ConfigDict(from_attributes=True)


class ProjectDetail(ProjectOut):
    skills: List[ProjectSkillOut] = []
