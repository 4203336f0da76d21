from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.routers.section_exercises import (
    PrescriptionBody,
    SectionExerciseTreeRead,
    build_tree_read,
)
from fitadmin.services import day_sections, section_exercises
from fitadmin.services.section_exercises import PrimaryExercise

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class DaySectionRead(SQLModel):
    id: int
    workout_day_id: int
    name: str
    section_order: int
    rounds: int
    rest_between_rounds_seconds: int | None
    description: str | None
    created_at: datetime


class DaySectionUpdate(SQLModel):
    name: str | None = None
    section_order: int | None = None
    rounds: int | None = None
    rest_between_rounds_seconds: int | None = None
    description: str | None = None


class SectionExerciseCreate(PrescriptionBody):
    exercise_order: int | None = None  # defaults to the end of the section
    alternatives: list[PrescriptionBody] = []


@router.get("/{id}", response_model=DaySectionRead)
def get_day_section(id: int, session: SessionDep):
    return day_sections.get_day_section(session, id)


@router.patch("/{id}", response_model=DaySectionRead)
def update_day_section(id: int, body: DaySectionUpdate, session: SessionDep):
    return day_sections.update_day_section(session, id, body.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=204)
def delete_day_section(id: int, session: SessionDep):
    day_sections.delete_day_section(session, id)


@router.get("/{id}/exercises", response_model=list[SectionExerciseTreeRead])
def list_section_exercises(id: int, session: SessionDep):
    return [build_tree_read(node) for node in section_exercises.list_section_exercises(session, id)]


@router.post("/{id}/exercises", response_model=SectionExerciseTreeRead, status_code=201)
def create_section_exercise(id: int, body: SectionExerciseCreate, session: SessionDep):
    primary = PrimaryExercise(
        prescription=body.to_prescription(),
        exercise_order=body.exercise_order,
        alternatives=[alt.to_prescription() for alt in body.alternatives],
    )
    return build_tree_read(section_exercises.create_section_exercise(session, id, primary))
