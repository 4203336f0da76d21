from collections.abc import Iterable

from loguru import logger
from sqlmodel import Session, select

from fitadmin.database import atomic
from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import Plan, WorkoutDay
from fitadmin.services import day_sections
from fitadmin.services.validation import in_range, reject_unknown_fields, require_name

UPDATABLE_FIELDS = {"week_number", "day_number", "name", "duration_est"}


def _validate(values: dict) -> None:
    for key, label in (("week_number", "Week number"), ("day_number", "Day number")):
        if values.get(key) is None:
            raise ValidationError(f"{label} is required")
        in_range(values[key], 1, label)
    require_name(values.get("name"), "Workout name")


def _get_plan(session: Session, plan_id: int) -> Plan:
    plan = session.get(Plan, plan_id)
    if plan is None:
        raise NotFound("Plan", plan_id)
    return plan


def delete_for_plan(session: Session, plan_id: int) -> int:
    """Delete a plan's days and everything under them. Does not commit."""
    days = session.exec(select(WorkoutDay).where(WorkoutDay.plan_id == plan_id)).all()
    day_sections.delete_for_days(session, [d.id for d in days])
    for day in days:
        session.delete(day)
    session.flush()
    return len(days)


def group_by_week(days: Iterable[WorkoutDay]) -> dict[int, list[WorkoutDay]]:
    """Group days by week_number; weeks ascending, days ordered by day_number."""
    weeks: dict[int, list[WorkoutDay]] = {}
    for day in sorted(days, key=lambda d: (d.week_number, d.day_number, d.id or 0)):
        weeks.setdefault(day.week_number, []).append(day)
    return weeks


def get_workout_day(session: Session, workout_day_id: int) -> WorkoutDay:
    day = session.get(WorkoutDay, workout_day_id)
    if day is None:
        raise NotFound("Workout day", workout_day_id)
    return day


def list_workout_days(session: Session, plan_id: int) -> list[WorkoutDay]:
    _get_plan(session, plan_id)
    return session.exec(
        select(WorkoutDay)
        .where(WorkoutDay.plan_id == plan_id)
        .order_by(WorkoutDay.week_number, WorkoutDay.day_number, WorkoutDay.id)
    ).all()


def weekly_overview(session: Session, plan_id: int) -> dict[int, list[WorkoutDay]]:
    return group_by_week(list_workout_days(session, plan_id))


def next_week_number(session: Session, plan_id: int) -> int:
    weeks = session.exec(select(WorkoutDay.week_number).where(WorkoutDay.plan_id == plan_id)).all()
    return max(weeks, default=0) + 1


def create_workout_day(
    session: Session,
    plan_id: int,
    week_number: int,
    day_number: int,
    name: str,
    duration_est: str | None = None,
) -> WorkoutDay:
    _get_plan(session, plan_id)
    values = dict(week_number=week_number, day_number=day_number, name=name, duration_est=duration_est)
    _validate(values)
    values["name"] = name.strip()

    day = WorkoutDay(plan_id=plan_id, **values)
    with atomic(session, "Create workout day"):
        session.add(day)

    session.refresh(day)
    logger.info(f"Created workout day id={day.id} (week {week_number}, day {day_number}) in plan {plan_id}")
    return day


def update_workout_day(session: Session, workout_day_id: int, changes: dict) -> WorkoutDay:
    day = get_workout_day(session, workout_day_id)
    reject_unknown_fields(changes, UPDATABLE_FIELDS, "workout day")

    merged = {name: getattr(day, name) for name in UPDATABLE_FIELDS}
    merged.update(changes)
    _validate(merged)

    with atomic(session, "Update workout day"):
        for name, value in changes.items():
            setattr(day, name, value.strip() if name == "name" else value)
        session.add(day)

    session.refresh(day)
    return day


def delete_workout_day(session: Session, workout_day_id: int) -> None:
    """Delete a day with its sections, section exercises and alternatives."""
    day = get_workout_day(session, workout_day_id)
    with atomic(session, "Delete workout day"):
        removed = day_sections.delete_for_days(session, [day.id])
        session.delete(day)
    logger.info(f"Deleted workout day id={workout_day_id} and {removed} section(s)")
