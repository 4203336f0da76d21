from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.routers.day_sections import DaySectionRead
from fitadmin.services import day_sections, workout_days

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class WorkoutDayRead(SQLModel):
    id: int
    plan_id: int
    week_number: int
    day_number: int
    name: str
    duration_est: str | None
    created_at: datetime


class WorkoutDayUpdate(SQLModel):
    week_number: int | None = None
    day_number: int | None = None
    name: str | None = None
    duration_est: str | None = None


class DaySectionCreate(SQLModel):
    name: str
    section_order: int | None = None  # defaults to the end of the day
    rounds: int = 1
    rest_between_rounds_seconds: int | None = None
    description: str | None = None


@router.get("/{id}", response_model=WorkoutDayRead)
def get_workout_day(id: int, session: SessionDep):
    return workout_days.get_workout_day(session, id)


@router.patch("/{id}", response_model=WorkoutDayRead)
def update_workout_day(id: int, body: WorkoutDayUpdate, session: SessionDep):
    return workout_days.update_workout_day(session, id, body.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=204)
def delete_workout_day(id: int, session: SessionDep):
    workout_days.delete_workout_day(session, id)


@router.get("/{id}/sections", response_model=list[DaySectionRead])
def list_day_sections(id: int, session: SessionDep):
    return day_sections.list_day_sections(session, id)


@router.post("/{id}/sections", response_model=DaySectionRead, status_code=201)
def create_day_section(id: int, body: DaySectionCreate, session: SessionDep):
    return day_sections.create_day_section(
        session,
        workout_day_id=id,
        name=body.name,
        section_order=body.section_order,
        rounds=body.rounds,
        rest_between_rounds_seconds=body.rest_between_rounds_seconds,
        description=body.description,
    )
