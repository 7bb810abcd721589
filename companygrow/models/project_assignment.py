from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base

ASSIGNMENT_STATUSES = ("active", "completed", "removed")


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False)
    role = Column(String(50), nullable=False, default="Team Member")
    assignment_date = Column(DateTime(timezone=True), server_default=func.now())
    hours_allocated = Column(Integer, nullable=False, default=0)
    hours_worked = Column(Integer, nullable=False, default=0)
    hourly_rate = Column(Numeric(8, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    performance_rating = Column(Integer, nullable=True)   # 1..5
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    project = relationship("Project", back_populates="assignments", lazy="joined")
    user = relationship("User", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "project_id", name="uq_project_assignment"),)
