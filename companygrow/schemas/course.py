from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, List
from datetime import datetime

from companygrow.schemas.skill import SkillOut

Difficulty = Literal["beginner", "intermediate", "advanced"]


class CourseBase(BaseModel):
    description: Optional[str] = None
    difficulty_level: Optional[Difficulty] = None
    duration_hours: Optional[int] = Field(default=None, ge=0)
    instructor_name: Optional[str] = Field(default=None, max_length=100)
    instructor_bio: Optional[str] = None
    course_image: Optional[str] = Field(default=None, max_length=500)
    video_url: Optional[str] = Field(default=None, max_length=500)
    course_materials: Optional[List[str]] = None
    prerequisites: Optional[str] = None
    learning_objectives: Optional[List[str]] = None
    price: Optional[float] = Field(default=None, ge=0)


class CourseCreate(CourseBase):
    title: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=50)
    is_active: bool = True


class CourseUpdate(CourseBase):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    is_active: Optional[bool] = None


class CourseOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: str
    difficulty_level: Optional[str] = None
    duration_hours: Optional[int] = None
    instructor_name: Optional[str] = None
    instructor_bio: Optional[str] = None
    course_image: Optional[str] = None
    video_url: Optional[str] = None
    course_materials: List[str] = []
    prerequisites: Optional[str] = None
    learning_objectives: List[str] = []
    is_active: bool
    price: float = 0
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CourseSkillCreate(BaseModel):
    course_id: int
    skill_id: int
    skill_level: int = Field(default=1, ge=1, le=5)


class CourseSkillUpdate(BaseModel):
    skill_level: int = Field(ge=1, le=5)


class CourseSkillOut(BaseModel):
    id: int
    course_id: int
    skill_id: int
    skill_level: int
    skill: Optional[SkillOut] = None
    model_config = ConfigDict(from_attributes=True)


class EnrollmentCreate(BaseModel):
    course_id: int
    user_id: Optional[int] = None


class ProgressUpdate(BaseModel):
    progress_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    status: Optional[Literal["enrolled", "in_progress", "completed", "dropped"]] = None
    final_score: Optional[int] = Field(default=None, ge=0, le=100)


class EnrollmentOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrollment_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    progress_percentage: int
    status: str
    final_score: Optional[int] = None
    certificate_url: Optional[str] = None
    course: Optional[CourseOut] = None
    model_config = ConfigDict(from_attributes=True)


class CourseListItem(CourseOut):
    enrollment_count: int = 0


class CourseDetail(CourseListItem):
    skills: List[CourseSkillOut] = []
    enrollment: Optional["EnrollmentBrief"] = None


class EnrollmentBrief(BaseModel):
    id: int
    status: str
    progress_percentage: int
    enrollment_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    final_score: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


CourseDetail.model_rebuild()
