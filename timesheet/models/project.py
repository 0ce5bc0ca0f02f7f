"""SQLAlchemy model for projects that group tasks and time entries."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Project(Base):
    """Top level bucket every task and time entry is booked against."""

    __tablename__ = "projects"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    tasks = relationship("Task", back_populates="project", order_by="Task.name")
    time_entries = relationship("TimeEntry", back_populates="project")


__all__ = ["Project"]
