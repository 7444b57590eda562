# squadboard/models/task.py

from __future__ import annotations

from sqlalchemy import Column, String, DateTime, ForeignKey
from squadboard.database import Base, utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True, index=True)

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False, default="general")

    status = Column(String, nullable=False, default="new")
    priority = Column(String, nullable=False, default="medium")

    deadline = Column(DateTime, nullable=True)

    # coach / staff references, kept as plain ids like the join table
    assignee_id = Column(String, nullable=True, index=True)
    creator_id = Column(String, nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class TaskAthlete(Base):
    __tablename__ = "task_athletes"

    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    athlete_id = Column(String, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True)
