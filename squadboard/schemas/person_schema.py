# squadboard/schemas/person_schema.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from squadboard.vocabulary import PERSON_TYPES


class PersonCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    type: str
    sport: Optional[str] = None
    team: Optional[str] = None
    position: Optional[str] = None

    @field_validator("type")
    def known_type(cls, value):
        value = value.strip().lower()
        if value not in PERSON_TYPES:
            raise ValueError("type must be 'athlete' or 'coach'")
        return value


class PersonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    sport: Optional[str] = None
    team: Optional[str] = None
    position: Optional[str] = None
