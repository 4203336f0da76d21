"""Copy a whole week of a plan into another week number.

The source week is loaded as a tree (days -> sections -> primaries ->
alternatives) before anything is written. Rows are then inserted top-down;
each new primary's id is recorded against the source primary's id so the
copied alternatives point at the new primaries, never at the source week.

The copy is one transaction. A failure part way through rolls back every row
written by the run and raises ``PartialFailure`` with what had been written.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fitadmin.errors import PartialFailure, ValidationError
from fitadmin.models import DaySection, SectionExercise, WorkoutDay
from fitadmin.services.plans import get_plan
from fitadmin.services.validation import in_range
from fitadmin.services.workout_days import next_week_number

PRESCRIPTION_COLUMNS = (
    "exercise_id",
    "exercise_order",
    "equipment_id",
    "reps",
    "duration_seconds",
    "sets",
    "rest_time_seconds",
    "notes",
)


@dataclass
class SectionTree:
    section: DaySection
    primaries: list[SectionExercise] = field(default_factory=list)
    alternatives: dict[int, list[SectionExercise]] = field(default_factory=dict)


@dataclass
class DayTree:
    day: WorkoutDay
    sections: list[SectionTree] = field(default_factory=list)


@dataclass
class DuplicationResult:
    plan_id: int
    from_week: int
    to_week: int
    days: int = 0
    sections: int = 0
    exercises: int = 0
    alternatives: int = 0
    day_ids: list[int] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "days": self.days,
            "sections": self.sections,
            "exercises": self.exercises,
            "alternatives": self.alternatives,
        }


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def load_week(session: Session, plan_id: int, week_number: int) -> list[DayTree]:
    """Load a week's days with their sections, primaries and alternatives."""
    days = session.exec(
        select(WorkoutDay)
        .where(WorkoutDay.plan_id == plan_id, WorkoutDay.week_number == week_number)
        .order_by(WorkoutDay.day_number, WorkoutDay.id)
    ).all()
    if not days:
        return []

    sections = session.exec(
        select(DaySection)
        .where(DaySection.workout_day_id.in_([d.id for d in days]))
        .order_by(DaySection.section_order, DaySection.id)
    ).all()
    section_ids = [s.id for s in sections]
    rows = (
        session.exec(
            select(SectionExercise)
            .where(SectionExercise.day_section_id.in_(section_ids))
            .order_by(SectionExercise.exercise_order, SectionExercise.id)
        ).all()
        if section_ids
        else []
    )

    section_trees = {s.id: SectionTree(section=s) for s in sections}
    alternatives_by_parent: dict[int, list[SectionExercise]] = defaultdict(list)
    for row in rows:
        if row.is_alternative:
            alternatives_by_parent[row.parent_section_exercise_id].append(row)
        else:
            section_trees[row.day_section_id].primaries.append(row)
    for tree in section_trees.values():
        tree.alternatives = {p.id: alternatives_by_parent.pop(p.id, []) for p in tree.primaries}

    for parent_id, orphans in alternatives_by_parent.items():
        logger.warning(
            f"Skipping {len(orphans)} alternative(s) of missing primary {parent_id} "
            f"in plan {plan_id} week {week_number}"
        )

    day_trees = {d.id: DayTree(day=d) for d in days}
    for section in sections:
        day_trees[section.workout_day_id].sections.append(section_trees[section.id])
    return list(day_trees.values())


def _copy_day(session: Session, source: WorkoutDay, to_week: int) -> WorkoutDay:
    day = WorkoutDay(
        plan_id=source.plan_id,
        week_number=to_week,
        day_number=source.day_number,
        name=source.name,
        duration_est=source.duration_est,
    )
    session.add(day)
    session.flush()
    return day


def _copy_section(session: Session, source: DaySection, workout_day_id: int) -> DaySection:
    section = DaySection(
        workout_day_id=workout_day_id,
        name=source.name,
        section_order=source.section_order,
        rounds=source.rounds,
        rest_between_rounds_seconds=source.rest_between_rounds_seconds,
        description=source.description,
    )
    session.add(section)
    session.flush()
    return section


def _copy_section_exercise(
    session: Session, source: SectionExercise, day_section_id: int, parent_id: int | None
) -> SectionExercise:
    row = SectionExercise(
        day_section_id=day_section_id,
        parent_section_exercise_id=parent_id,
        **{column: getattr(source, column) for column in PRESCRIPTION_COLUMNS},
    )
    session.add(row)
    session.flush()
    return row


def _write_copy(session: Session, week: list[DayTree], result: DuplicationResult) -> None:
    for day_tree in week:
        new_day = _copy_day(session, day_tree.day, result.to_week)
        result.days += 1
        result.day_ids.append(new_day.id)

        for section_tree in day_tree.sections:
            new_section = _copy_section(session, section_tree.section, new_day.id)
            result.sections += 1

            # source primary id -> copied primary id
            id_map: dict[int, int] = {}
            for primary in section_tree.primaries:
                copied = _copy_section_exercise(session, primary, new_section.id, None)
                id_map[primary.id] = copied.id
                result.exercises += 1

            for primary in section_tree.primaries:
                for alternative in section_tree.alternatives[primary.id]:
                    _copy_section_exercise(session, alternative, new_section.id, id_map[primary.id])
                    result.alternatives += 1


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def duplicate_week(
    session: Session, plan_id: int, from_week: int, to_week: int | None = None
) -> DuplicationResult:
    """Copy ``from_week`` of a plan into ``to_week`` (default: the week after the last one)."""
    get_plan(session, plan_id)
    in_range(from_week, 1, "Source week")
    in_range(to_week, 1, "Target week")

    week = load_week(session, plan_id, from_week)
    if to_week is None:
        to_week = next_week_number(session, plan_id)
    result = DuplicationResult(plan_id=plan_id, from_week=from_week, to_week=to_week)
    if not week:
        logger.warning(f"Plan {plan_id} has no days in week {from_week}; nothing to duplicate")
        return result
    if from_week == to_week:
        raise ValidationError("Cannot duplicate a week onto itself")

    target_taken = session.exec(
        select(WorkoutDay.id).where(WorkoutDay.plan_id == plan_id, WorkoutDay.week_number == to_week)
    ).first()
    if target_taken is not None:
        logger.warning(f"Plan {plan_id} week {to_week} already has days; copied days are added to it")

    try:
        _write_copy(session, week, result)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(
            f"Duplicating plan {plan_id} week {from_week} -> {to_week} failed after {result.counts()}"
        )
        raise PartialFailure("Week duplication", result.counts()) from exc

    logger.info(
        f"Duplicated plan {plan_id} week {from_week} -> {to_week}: "
        f"{result.days} day(s), {result.sections} section(s), "
        f"{result.exercises} exercise(s), {result.alternatives} alternative(s)"
    )
    return result
