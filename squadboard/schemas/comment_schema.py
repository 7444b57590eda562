# squadboard/schemas/comment_schema.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from squadboard.schemas.task_schema import CamelModel


class CommentCreate(CamelModel):
    author_id: Optional[str] = None
    content: str = Field(min_length=1)


class CommentRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    task_id: str
    author_id: Optional[str] = None
    content: str
    created_at: datetime
