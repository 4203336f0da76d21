from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.routers.workout_days import WorkoutDayRead
from fitadmin.services import duplication, plans, workout_days

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PlanRead(SQLModel):
    id: int
    name: str
    category: str
    focus: str
    description: str | None
    created_at: datetime


class WeekRead(SQLModel):
    week_number: int
    days: list[WorkoutDayRead]


class DuplicationRead(SQLModel):
    plan_id: int
    from_week: int
    to_week: int
    days: int
    sections: int
    exercises: int
    alternatives: int
    day_ids: list[int]


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlanCreate(SQLModel):
    name: str
    category: str = "Beginner"
    focus: str = "General"
    description: str | None = None


class PlanUpdate(SQLModel):
    name: str | None = None
    category: str | None = None
    focus: str | None = None
    description: str | None = None


class WorkoutDayCreate(SQLModel):
    week_number: int = 1
    day_number: int
    name: str
    duration_est: str | None = None


class DuplicateWeekBody(SQLModel):
    to_week: int | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[PlanRead])
def list_plans(session: SessionDep):
    return plans.list_plans(session)


@router.post("/", response_model=PlanRead, status_code=201)
def create_plan(body: PlanCreate, session: SessionDep):
    return plans.create_plan(
        session,
        name=body.name,
        category=body.category,
        focus=body.focus,
        description=body.description,
    )


@router.get("/{id}", response_model=PlanRead)
def get_plan(id: int, session: SessionDep):
    return plans.get_plan(session, id)


@router.patch("/{id}", response_model=PlanRead)
def update_plan(id: int, body: PlanUpdate, session: SessionDep):
    return plans.update_plan(session, id, body.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=204)
def delete_plan(id: int, session: SessionDep):
    plans.delete_plan(session, id)


@router.get("/{id}/days", response_model=list[WorkoutDayRead])
def list_workout_days(id: int, session: SessionDep):
    return workout_days.list_workout_days(session, id)


@router.post("/{id}/days", response_model=WorkoutDayRead, status_code=201)
def create_workout_day(id: int, body: WorkoutDayCreate, session: SessionDep):
    return workout_days.create_workout_day(
        session,
        plan_id=id,
        week_number=body.week_number,
        day_number=body.day_number,
        name=body.name,
        duration_est=body.duration_est,
    )


@router.get("/{id}/weeks", response_model=list[WeekRead])
def weekly_overview(id: int, session: SessionDep):
    weeks = workout_days.weekly_overview(session, id)
    return [
        WeekRead(week_number=week, days=[WorkoutDayRead.model_validate(d) for d in days])
        for week, days in weeks.items()
    ]


@router.post("/{id}/weeks/{from_week}/duplicate", response_model=DuplicationRead, status_code=201)
def duplicate_week(id: int, from_week: int, session: SessionDep, body: DuplicateWeekBody | None = None):
    to_week = body.to_week if body is not None else None
    result = duplication.duplicate_week(session, id, from_week, to_week)
    return DuplicationRead(
        plan_id=result.plan_id,
        from_week=result.from_week,
        to_week=result.to_week,
        days=result.days,
        sections=result.sections,
        exercises=result.exercises,
        alternatives=result.alternatives,
        day_ids=result.day_ids,
    )
