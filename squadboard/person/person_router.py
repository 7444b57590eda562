# squadboard/person/person_router.py

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from squadboard.database import get_db
from squadboard.models.person import Person
from squadboard.schemas.person_schema import PersonCreate, PersonRead
from squadboard.vocabulary import PERSON_TYPES

logger = logging.getLogger("squadboard.people")

router = APIRouter(tags=["people"])


def _people(db: Session, person_type: Optional[str] = None):
    query = db.query(Person)
    if person_type is not None:
        query = query.filter(Person.type == person_type)
    return query.order_by(Person.name).all()


@router.get("/people", response_model=list[PersonRead])
def list_people(type: Optional[str] = None, db: Session = Depends(get_db)):
    if type is not None and type not in PERSON_TYPES:
        raise HTTPException(400, "type must be 'athlete' or 'coach'")
    return _people(db, type)


@router.get("/people/{person_id}", response_model=PersonRead)
def get_person(person_id: str, db: Session = Depends(get_db)):
    person = db.get(Person, person_id)
    if not person:
        raise HTTPException(404, "Person not found")
    return person


@router.post("/people", response_model=PersonRead, status_code=201)
def create_person(data: PersonCreate, db: Session = Depends(get_db)):
    person_id = data.id or str(uuid.uuid4())
    if db.get(Person, person_id):
        raise HTTPException(409, "Person already exists")

    person = Person(**data.model_dump(exclude={"id"}), id=person_id)
    db.add(person)
    db.commit()
    db.refresh(person)

    logger.info("person_created", extra={"person_id": person.id, "person_type": person.type})
    return person


@router.get("/athletes", response_model=list[PersonRead])
def list_athletes(db: Session = Depends(get_db)):
    return _people(db, "athlete")


@router.get("/coaches", response_model=list[PersonRead])
def list_coaches(db: Session = Depends(get_db)):
    return _people(db, "coach")
