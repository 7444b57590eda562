# squadboard/models/person.py
from __future__ import annotations

from sqlalchemy import Column, String
from squadboard.database import Base


class Person(Base):
    __tablename__ = "people"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)

    # athlete | coach (one identity table for both roles)
    type = Column(String, nullable=False, index=True)

    # athlete-only details
    sport = Column(String, nullable=True)
    team = Column(String, nullable=True)
    position = Column(String, nullable=True)
