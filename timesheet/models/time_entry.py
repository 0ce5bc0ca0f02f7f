"""SQLAlchemy model for a recorded span of work."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __allow_unmapped__ = True
    __table_args__ = (Index("ix_time_entries_user_start", "user_id", "start_time"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    description = Column(Text, nullable=True)
    # ISO-8601 UTC strings; they sort chronologically as text.
    start_time = Column(Text, nullable=False, index=True)
    end_time = Column(Text, nullable=True)
    # Whole minutes, derived on write. NULL while the entry is in progress.
    duration = Column(Integer, nullable=True)
    invoice_number = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="time_entries")
    project = relationship("Project", back_populates="time_entries")
    task = relationship("Task", back_populates="time_entries")

    @property
    def in_progress(self) -> bool:
        return not self.end_time

    @property
    def project_name(self) -> str | None:
        return self.project.name if self.project is not None else None

    @property
    def task_name(self) -> str | None:
        return self.task.name if self.task is not None else None


__all__ = ["TimeEntry"]
