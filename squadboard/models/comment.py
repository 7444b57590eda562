# squadboard/models/comment.py
from __future__ import annotations

from sqlalchemy import Column, String, DateTime, ForeignKey
from squadboard.database import Base, utcnow


class TaskComment(Base):
    __tablename__ = "task_comments"

    id = Column(String, primary_key=True, index=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String, nullable=True)
    content = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
