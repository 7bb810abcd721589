from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from companygrow.db import Base


class CourseSkill(Base):
    __tablename__ = "course_skills"
    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), index=True, nullable=False)
    skill_level = Column(Integer, nullable=False, default=1)   # nivel que enseña (1..5)

    course = relationship("Course", back_populates="skills")
    skill = relationship("Skill", lazy="joined")

    __table_args__ = (UniqueConstraint("course_id", "skill_id", name="uq_course_skill"),)
