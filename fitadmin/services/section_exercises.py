"""Section exercise composer.

A section exercise is either a *primary* (``parent_section_exercise_id`` is
null) or an *alternative* that substitutes for exactly one primary of the same
section. Nesting is one level deep: an alternative never has alternatives.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass, field

from loguru import logger
from sqlmodel import Session, select

from fitadmin.database import atomic
from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import DaySection, Equipment, Exercise, SectionExercise
from fitadmin.services.validation import MAX_INTEGER, in_range, reject_unknown_fields

PRESCRIPTION_FIELDS = (
    "exercise_id",
    "equipment_id",
    "reps",
    "duration_seconds",
    "sets",
    "rest_time_seconds",
    "notes",
)
UPDATABLE_FIELDS = set(PRESCRIPTION_FIELDS) | {"exercise_order"}


@dataclass
class Prescription:
    exercise_id: int
    equipment_id: int | None = None
    reps: str | None = None
    duration_seconds: int | None = None
    sets: int | None = None
    rest_time_seconds: int | None = None
    notes: str | None = None


@dataclass
class PrimaryExercise:
    prescription: Prescription
    exercise_order: int | None = None  # None appends after the last primary
    alternatives: list[Prescription] = field(default_factory=list)


@dataclass
class SectionExerciseNode:
    row: SectionExercise
    exercise: Exercise | None
    equipment: Equipment | None
    alternatives: list["SectionExerciseNode"] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _blank_to_none(value: str | None) -> str | None:
    if value is None or value.strip() == "":
        return None
    return value


def _check_amounts(values: dict) -> None:
    in_range(values.get("sets"), 1, "Sets")
    in_range(values.get("duration_seconds"), 0, "Duration")
    in_range(values.get("rest_time_seconds"), 0, "Rest time")


def _check_references(session: Session, exercise_id: int | None, equipment_id: int | None) -> None:
    if exercise_id is None:
        raise ValidationError("Please select an exercise")
    if exercise_id > MAX_INTEGER or session.get(Exercise, exercise_id) is None:
        raise ValidationError(f"Exercise with id {exercise_id} does not exist")
    if equipment_id is not None and (
        equipment_id > MAX_INTEGER or session.get(Equipment, equipment_id) is None
    ):
        raise ValidationError(f"Equipment with id {equipment_id} does not exist")


def _validate_prescription(session: Session, prescription: Prescription) -> None:
    _check_amounts(asdict(prescription))
    _check_references(session, prescription.exercise_id, prescription.equipment_id)


def _get_section(session: Session, day_section_id: int) -> DaySection:
    section = session.get(DaySection, day_section_id)
    if section is None:
        raise NotFound("Day section", day_section_id)
    return section


def _insert(
    session: Session,
    day_section_id: int,
    prescription: Prescription,
    exercise_order: int,
    parent_id: int | None = None,
) -> SectionExercise:
    """Add one row and flush so its generated id is available."""
    values = asdict(prescription)
    values["reps"] = _blank_to_none(values["reps"])
    values["notes"] = _blank_to_none(values["notes"])
    row = SectionExercise(
        day_section_id=day_section_id,
        parent_section_exercise_id=parent_id,
        exercise_order=exercise_order,
        **values,
    )
    session.add(row)
    session.flush()
    return row


def _alternatives_of(session: Session, parent_ids: list[int]) -> list[SectionExercise]:
    if not parent_ids:
        return []
    return session.exec(
        select(SectionExercise)
        .where(SectionExercise.parent_section_exercise_id.in_(parent_ids))
        .order_by(SectionExercise.exercise_order, SectionExercise.id)
    ).all()


def _build_trees(session: Session, primaries: list[SectionExercise]) -> list[SectionExerciseNode]:
    """Attach alternatives plus the referenced Exercise/Equipment rows, one level deep."""
    alternatives = _alternatives_of(session, [p.id for p in primaries])
    rows = list(primaries) + list(alternatives)

    exercise_ids = {r.exercise_id for r in rows}
    equipment_ids = {r.equipment_id for r in rows if r.equipment_id is not None}
    exercises = (
        {e.id: e for e in session.exec(select(Exercise).where(Exercise.id.in_(exercise_ids))).all()}
        if exercise_ids
        else {}
    )
    equipment = (
        {e.id: e for e in session.exec(select(Equipment).where(Equipment.id.in_(equipment_ids))).all()}
        if equipment_ids
        else {}
    )

    by_parent: dict[int, list[SectionExerciseNode]] = defaultdict(list)
    for alt in alternatives:
        by_parent[alt.parent_section_exercise_id].append(
            SectionExerciseNode(
                row=alt,
                exercise=exercises.get(alt.exercise_id),
                equipment=equipment.get(alt.equipment_id),
            )
        )

    return [
        SectionExerciseNode(
            row=p,
            exercise=exercises.get(p.exercise_id),
            equipment=equipment.get(p.equipment_id),
            alternatives=by_parent.get(p.id, []),
        )
        for p in primaries
    ]


def delete_for_sections(session: Session, section_ids: list[int]) -> int:
    """Delete every section exercise under the given sections, alternatives first.

    Does not commit; callers run this inside their own transaction.
    """
    if not section_ids:
        return 0
    rows = session.exec(
        select(SectionExercise).where(SectionExercise.day_section_id.in_(section_ids))
    ).all()
    alternatives = [r for r in rows if r.is_alternative]
    primaries = [r for r in rows if not r.is_alternative]
    for row in alternatives:
        session.delete(row)
    session.flush()
    for row in primaries:
        session.delete(row)
    session.flush()
    return len(rows)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def next_exercise_order(session: Session, day_section_id: int) -> int:
    orders = session.exec(
        select(SectionExercise.exercise_order).where(
            SectionExercise.day_section_id == day_section_id,
            SectionExercise.parent_section_exercise_id.is_(None),
        )
    ).all()
    return max(orders, default=0) + 1


def get_section_exercise(session: Session, section_exercise_id: int) -> SectionExercise:
    row = session.get(SectionExercise, section_exercise_id)
    if row is None:
        raise NotFound("Section exercise", section_exercise_id)
    return row


def get_section_exercise_tree(session: Session, section_exercise_id: int) -> SectionExerciseNode:
    return _build_trees(session, [get_section_exercise(session, section_exercise_id)])[0]


def list_section_exercises(session: Session, day_section_id: int) -> list[SectionExerciseNode]:
    """Return the primaries of a section, each with its alternatives attached."""
    _get_section(session, day_section_id)
    primaries = session.exec(
        select(SectionExercise)
        .where(
            SectionExercise.day_section_id == day_section_id,
            SectionExercise.parent_section_exercise_id.is_(None),
        )
        .order_by(SectionExercise.exercise_order, SectionExercise.id)
    ).all()
    return _build_trees(session, list(primaries))


def list_alternatives(session: Session, parent_id: int) -> list[SectionExercise]:
    get_section_exercise(session, parent_id)
    return _alternatives_of(session, [parent_id])


def create_section_exercise(
    session: Session, day_section_id: int, primary: PrimaryExercise
) -> SectionExerciseNode:
    """Insert a primary, then its alternatives pointing at the primary's new id.

    The batch is a single transaction: if any insert fails, neither the
    primary nor any alternative is kept.
    """
    _get_section(session, day_section_id)
    _validate_prescription(session, primary.prescription)
    for alternative in primary.alternatives:
        _validate_prescription(session, alternative)

    exercise_order = primary.exercise_order
    if exercise_order is None:
        exercise_order = next_exercise_order(session, day_section_id)
    in_range(exercise_order, 1, "Exercise order")

    with atomic(session, "Create section exercise"):
        row = _insert(session, day_section_id, primary.prescription, exercise_order)
        for position, alternative in enumerate(primary.alternatives, start=1):
            _insert(session, day_section_id, alternative, position, parent_id=row.id)

    logger.info(
        f"Created section exercise id={row.id} in section {day_section_id} "
        f"with {len(primary.alternatives)} alternative(s)"
    )
    return get_section_exercise_tree(session, row.id)


def add_alternative(session: Session, parent_id: int, prescription: Prescription) -> SectionExercise:
    parent = get_section_exercise(session, parent_id)
    if parent.is_alternative:
        raise ValidationError("An alternative exercise cannot have alternatives of its own")
    _validate_prescription(session, prescription)

    existing = _alternatives_of(session, [parent.id])
    exercise_order = max((a.exercise_order for a in existing), default=0) + 1

    with atomic(session, "Add alternative exercise"):
        row = _insert(session, parent.day_section_id, prescription, exercise_order, parent_id=parent.id)

    session.refresh(row)
    logger.info(f"Added alternative id={row.id} to section exercise {parent.id}")
    return row


def update_section_exercise(session: Session, section_exercise_id: int, changes: dict) -> SectionExercise:
    """Update one row in place; siblings and alternatives are left untouched."""
    row = get_section_exercise(session, section_exercise_id)
    reject_unknown_fields(changes, UPDATABLE_FIELDS, "section exercise")

    _check_amounts(changes)
    if "exercise_order" in changes:
        if changes["exercise_order"] is None:
            raise ValidationError("Exercise order is required")
        in_range(changes["exercise_order"], 1, "Exercise order")
    if "exercise_id" in changes or "equipment_id" in changes:
        _check_references(
            session,
            changes.get("exercise_id", row.exercise_id),
            changes.get("equipment_id", row.equipment_id),
        )

    with atomic(session, "Update section exercise"):
        for name, value in changes.items():
            if name in ("reps", "notes"):
                value = _blank_to_none(value)
            setattr(row, name, value)
        session.add(row)

    session.refresh(row)
    return row


def delete_section_exercise(
    session: Session, section_exercise_id: int, with_alternatives: bool = True
) -> None:
    """Delete a row. Deleting a primary also deletes its alternatives.

    With ``with_alternatives=False`` a primary that still has alternatives is
    rejected rather than leaving them pointing at a missing parent.
    """
    row = get_section_exercise(session, section_exercise_id)
    alternatives = [] if row.is_alternative else _alternatives_of(session, [row.id])
    if alternatives and not with_alternatives:
        raise ValidationError(
            f"Section exercise has {len(alternatives)} alternative(s); delete them first"
        )

    with atomic(session, "Delete section exercise"):
        for alternative in alternatives:
            session.delete(alternative)
        session.flush()
        session.delete(row)

    logger.info(
        f"Deleted section exercise id={section_exercise_id} "
        f"and {len(alternatives)} alternative(s)"
    )
