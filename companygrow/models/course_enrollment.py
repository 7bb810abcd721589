from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base

ENROLLMENT_STATUSES = ("enrolled", "in_progress", "completed", "dropped")
OPEN_STATUSES = ("enrolled", "in_progress")


class CourseEnrollment(Base):
    __tablename__ = "course_enrollments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    enrollment_date = Column(DateTime(timezone=True), server_default=func.now())
    start_date = Column(DateTime(timezone=True), nullable=True)
    completion_date = Column(DateTime(timezone=True), nullable=True)
    progress_percentage = Column(Integer, nullable=False, default=0)   # 0..100
    status = Column(String(20), nullable=False, default="enrolled")
    final_score = Column(Integer, nullable=True)                       # 0..100
    certificate_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    course = relationship("Course", back_populates="enrollments", lazy="joined")
    user = relationship("User", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_course_enrollment"),)
