"""Shared exercise and equipment catalog referenced by section exercises."""

from loguru import logger
from sqlalchemy import func, or_
from sqlmodel import Session, select

from fitadmin.database import atomic
from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import Equipment, Exercise, SectionExercise
from fitadmin.services.validation import optional_url, reject_unknown_fields, require_name

EXERCISE_FIELDS = {"name", "description", "video_url", "thumbnail_url"}
EQUIPMENT_FIELDS = {"name"}


def _usage_count(session: Session, column, entity_id: int) -> int:
    statement = select(func.count()).select_from(SectionExercise).where(column == entity_id)
    return session.exec(statement).one()


def _clean_exercise(values: dict) -> dict:
    cleaned = dict(values)
    if "name" in cleaned:
        cleaned["name"] = require_name(cleaned["name"], "Exercise name")
    if "description" in cleaned:
        cleaned["description"] = cleaned["description"] or None
    for key, label in (("video_url", "Video URL"), ("thumbnail_url", "Thumbnail URL")):
        if key in cleaned:
            cleaned[key] = optional_url(cleaned[key], label)
    return cleaned


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------


def get_exercise(session: Session, exercise_id: int) -> Exercise:
    exercise = session.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFound("Exercise", exercise_id)
    return exercise


def list_exercises(session: Session, search: str | None = None) -> list[Exercise]:
    statement = select(Exercise)
    if search:
        term = search.lower()
        statement = statement.where(
            or_(func.lower(Exercise.name).contains(term), func.lower(Exercise.description).contains(term))
        )
    return session.exec(statement.order_by(Exercise.name, Exercise.id)).all()


def create_exercise(
    session: Session,
    name: str,
    description: str | None = None,
    video_url: str | None = None,
    thumbnail_url: str | None = None,
) -> Exercise:
    values = _clean_exercise(
        dict(name=name, description=description, video_url=video_url, thumbnail_url=thumbnail_url)
    )
    exercise = Exercise(**values)
    with atomic(session, "Create exercise"):
        session.add(exercise)
    session.refresh(exercise)
    logger.info(f"Created exercise id={exercise.id} ({exercise.name!r})")
    return exercise


def update_exercise(session: Session, exercise_id: int, changes: dict) -> Exercise:
    exercise = get_exercise(session, exercise_id)
    reject_unknown_fields(changes, EXERCISE_FIELDS, "exercise")
    cleaned = _clean_exercise(changes)
    with atomic(session, "Update exercise"):
        for name, value in cleaned.items():
            setattr(exercise, name, value)
        session.add(exercise)
    session.refresh(exercise)
    return exercise


def delete_exercise(session: Session, exercise_id: int) -> None:
    exercise = get_exercise(session, exercise_id)
    in_use = _usage_count(session, SectionExercise.exercise_id, exercise_id)
    if in_use:
        raise ValidationError(f"Exercise is used by {in_use} section exercise(s)")
    with atomic(session, "Delete exercise"):
        session.delete(exercise)
    logger.info(f"Deleted exercise id={exercise_id}")


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------


def get_equipment(session: Session, equipment_id: int) -> Equipment:
    equipment = session.get(Equipment, equipment_id)
    if equipment is None:
        raise NotFound("Equipment", equipment_id)
    return equipment


def list_equipment(session: Session, search: str | None = None) -> list[Equipment]:
    statement = select(Equipment)
    if search:
        statement = statement.where(func.lower(Equipment.name).contains(search.lower()))
    return session.exec(statement.order_by(Equipment.name, Equipment.id)).all()


def create_equipment(session: Session, name: str) -> Equipment:
    equipment = Equipment(name=require_name(name, "Equipment name"))
    with atomic(session, "Create equipment"):
        session.add(equipment)
    session.refresh(equipment)
    logger.info(f"Created equipment id={equipment.id} ({equipment.name!r})")
    return equipment


def update_equipment(session: Session, equipment_id: int, changes: dict) -> Equipment:
    equipment = get_equipment(session, equipment_id)
    reject_unknown_fields(changes, EQUIPMENT_FIELDS, "equipment")
    if "name" in changes:
        name = require_name(changes["name"], "Equipment name")
        with atomic(session, "Update equipment"):
            equipment.name = name
            session.add(equipment)
        session.refresh(equipment)
    return equipment


def delete_equipment(session: Session, equipment_id: int) -> None:
    equipment = get_equipment(session, equipment_id)
    in_use = _usage_count(session, SectionExercise.equipment_id, equipment_id)
    if in_use:
        raise ValidationError(f"Equipment is used by {in_use} section exercise(s)")
    with atomic(session, "Delete equipment"):
        session.delete(equipment)
    logger.info(f"Deleted equipment id={equipment_id}")
