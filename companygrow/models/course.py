from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Numeric, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base

DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    difficulty_level = Column(String(20), nullable=True)     # beginner | intermediate | advanced
    duration_hours = Column(Integer, nullable=True)
    instructor_name = Column(String(100), nullable=True)
    instructor_bio = Column(Text, nullable=True)
    course_image = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True)
    course_materials = Column(JSON, nullable=False, default=list)       # [url|texto, ...]
    prerequisites = Column(Text, nullable=True)
    learning_objectives = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    skills = relationship("CourseSkill", back_populates="course", cascade="all, delete-orphan")
    enrollments = relationship("CourseEnrollment", back_populates="course", cascade="all, delete-orphan")
