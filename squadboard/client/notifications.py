# squadboard/client/notifications.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Notification(BaseModel):
    """Toast-style message handed to whoever renders the task views."""

    type: Literal["info", "success", "warning", "error"] = "info"
    title: str
    message: Optional[str] = None
    task_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
