from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None


class SkillOut(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class UserSkillCreate(BaseModel):
    skill_id: int
    proficiency_level: int = Field(default=1, ge=1, le=5)
    years_experience: int = Field(default=0, ge=0)
    user_id: Optional[int] = None


class UserSkillUpdate(BaseModel):
    proficiency_level: Optional[int] = Field(default=None, ge=1, le=5)
    years_experience: Optional[int] = Field(default=None, ge=0)
    is_verified: Optional[bool] = None


class UserSkillOut(BaseModel):
    id: int
    user_id: int
    skill_id: int
    proficiency_level: int
    years_experience: int
    is_verified: bool
    skill: Optional[SkillOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
