from loguru import logger
from sqlmodel import Session, select

from fitadmin.database import atomic
from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import SECTION_NAMES, DaySection, WorkoutDay
from fitadmin.services import section_exercises
from fitadmin.services.validation import in_range, reject_unknown_fields, require_choice

UPDATABLE_FIELDS = {"name", "section_order", "rounds", "rest_between_rounds_seconds", "description"}


def _validate(values: dict) -> None:
    require_choice(values.get("name"), SECTION_NAMES, "Section name")
    if values.get("section_order") is None:
        raise ValidationError("Section order is required")
    in_range(values["section_order"], 1, "Section order")
    if values.get("rounds") is None:
        raise ValidationError("Rounds is required")
    in_range(values["rounds"], 1, "Rounds")
    in_range(values.get("rest_between_rounds_seconds"), 0, "Rest between rounds")


def _get_day(session: Session, workout_day_id: int) -> WorkoutDay:
    day = session.get(WorkoutDay, workout_day_id)
    if day is None:
        raise NotFound("Workout day", workout_day_id)
    return day


def delete_for_days(session: Session, day_ids: list[int]) -> int:
    """Delete the sections of the given days and everything under them. Does not commit."""
    if not day_ids:
        return 0
    sections = session.exec(select(DaySection).where(DaySection.workout_day_id.in_(day_ids))).all()
    section_exercises.delete_for_sections(session, [s.id for s in sections])
    for section in sections:
        session.delete(section)
    session.flush()
    return len(sections)


def next_section_order(session: Session, workout_day_id: int) -> int:
    """Order that appends a new section after the day's existing ones."""
    orders = session.exec(
        select(DaySection.section_order).where(DaySection.workout_day_id == workout_day_id)
    ).all()
    return max(orders, default=0) + 1


def get_day_section(session: Session, day_section_id: int) -> DaySection:
    section = session.get(DaySection, day_section_id)
    if section is None:
        raise NotFound("Day section", day_section_id)
    return section


def list_day_sections(session: Session, workout_day_id: int) -> list[DaySection]:
    _get_day(session, workout_day_id)
    return session.exec(
        select(DaySection)
        .where(DaySection.workout_day_id == workout_day_id)
        .order_by(DaySection.section_order, DaySection.id)
    ).all()


def create_day_section(
    session: Session,
    workout_day_id: int,
    name: str,
    section_order: int | None = None,
    rounds: int = 1,
    rest_between_rounds_seconds: int | None = None,
    description: str | None = None,
) -> DaySection:
    _get_day(session, workout_day_id)
    if section_order is None:
        section_order = next_section_order(session, workout_day_id)

    values = dict(
        name=name,
        section_order=section_order,
        rounds=rounds,
        rest_between_rounds_seconds=rest_between_rounds_seconds,
        description=description,
    )
    _validate(values)

    section = DaySection(workout_day_id=workout_day_id, **values)
    with atomic(session, "Create day section"):
        session.add(section)

    session.refresh(section)
    logger.info(f"Created day section id={section.id} ({section.name}) in day {workout_day_id}")
    return section


def update_day_section(session: Session, day_section_id: int, changes: dict) -> DaySection:
    section = get_day_section(session, day_section_id)
    reject_unknown_fields(changes, UPDATABLE_FIELDS, "day section")

    merged = {name: getattr(section, name) for name in UPDATABLE_FIELDS}
    merged.update(changes)
    _validate(merged)

    with atomic(session, "Update day section"):
        for name, value in changes.items():
            setattr(section, name, value)
        session.add(section)

    session.refresh(section)
    return section


def delete_day_section(session: Session, day_section_id: int) -> None:
    """Delete a section together with all of its exercises and alternatives."""
    section = get_day_section(session, day_section_id)
    with atomic(session, "Delete day section"):
        removed = section_exercises.delete_for_sections(session, [section.id])
        session.delete(section)
    logger.info(f"Deleted day section id={day_section_id} and {removed} section exercise(s)")
