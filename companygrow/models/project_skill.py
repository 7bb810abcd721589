from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from companygrow.db import Base


class ProjectSkill(Base):
    __tablename__ = "project_skills"
    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), index=True, nullable=False)
    required_level = Column(Integer, nullable=False, default=1)   # 1..5
    is_mandatory = Column(Boolean, nullable=False, default=True)

    project = relationship("Project", back_populates="skills")
    skill = relationship("Skill", lazy="joined")

    __table_args__ = (UniqueConstraint("project_id", "skill_id", name="uq_project_skill"),)
