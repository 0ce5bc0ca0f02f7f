"""SQLAlchemy model for tasks; each task belongs to exactly one project."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Task(Base):
    __tablename__ = "tasks"
    __allow_unmapped__ = True
    __table_args__ = (Index("ix_tasks_project_name", "project_id", "name"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    project = relationship("Project", back_populates="tasks")
    time_entries = relationship("TimeEntry", back_populates="task")

    @property
    def project_name(self) -> str | None:
        return self.project.name if self.project is not None else None


__all__ = ["Task"]
