"""
Seed the database with a small exercise catalog and a sample beginner plan.
Run with: python -m fitadmin.seed

WARNING: Drops all existing plan and catalog data before inserting.
"""

from loguru import logger
from sqlmodel import Session, select

from fitadmin.config import get_settings
from fitadmin.database import create_db_and_tables, engine
from fitadmin.logging_config import setup_logger
from fitadmin.models import DaySection, Equipment, Exercise, Plan, SectionExercise, WorkoutDay
from fitadmin.services import catalog, day_sections, duplication, plans, section_exercises, workout_days
from fitadmin.services.section_exercises import Prescription, PrimaryExercise

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

EXERCISES = [
    ("Jumping Jack", "Full-body warm-up movement"),
    ("Arm Circle", "Shoulder mobility drill"),
    ("Push-up", "Bodyweight horizontal press"),
    ("Knee Push-up", "Push-up regression performed from the knees"),
    ("Bodyweight Squat", None),
    ("Goblet Squat", "Squat holding a dumbbell at the chest"),
    ("Dumbbell Row", None),
    ("Inverted Row", "Bodyweight row under a bar or table"),
    ("Plank", None),
    ("Child's Pose", "Resting stretch"),
]

EQUIPMENT = ["Dumbbell", "Mat", "Pull-up Bar", "Resistance Band"]

# (section name, rounds, rest, [(exercise, equipment, sets, reps, duration, [alternatives])])
WEEK_ONE = {
    (1, "Day 1", "35 min"): [
        ("Warm-up", 1, None, [
            ("Jumping Jack", None, None, None, 60, []),
            ("Arm Circle", None, None, None, 30, []),
        ]),
        ("Main Workout", 3, 90, [
            ("Push-up", None, 3, "10-12", None, [("Knee Push-up", None, 3, "10-12")]),
            ("Bodyweight Squat", None, 3, "15", None, [("Goblet Squat", "Dumbbell", 3, "10")]),
        ]),
        ("Cooldown", 1, None, [
            ("Child's Pose", "Mat", None, None, 60, []),
        ]),
    ],
    (3, "Day 2", "30 min"): [
        ("Main Workout", 3, 60, [
            ("Dumbbell Row", "Dumbbell", 3, "10", None, [("Inverted Row", "Pull-up Bar", 3, "8")]),
            ("Plank", "Mat", 3, None, 30, []),
        ]),
    ],
}


def seed() -> None:
    setup_logger(get_settings().log_level)
    create_db_and_tables()

    with Session(engine) as session:
        # ------------------------------------------------------------------
        # Wipe existing data (children first)
        # ------------------------------------------------------------------
        for model in [SectionExercise, DaySection, WorkoutDay, Plan, Exercise, Equipment]:
            for row in session.exec(select(model)).all():
                session.delete(row)
            session.flush()
        session.commit()
        logger.info("Cleared existing data.")

        exercise_ids = {
            name: catalog.create_exercise(session, name, description).id
            for name, description in EXERCISES
        }
        equipment_ids = {name: catalog.create_equipment(session, name).id for name in EQUIPMENT}

        plan = plans.create_plan(session, "Beginner Full Body", "Beginner", "General")

        for (day_number, day_name, duration), sections in WEEK_ONE.items():
            day = workout_days.create_workout_day(session, plan.id, 1, day_number, day_name, duration)
            for section_name, rounds, rest, entries in sections:
                section = day_sections.create_day_section(
                    session, day.id, section_name, rounds=rounds, rest_between_rounds_seconds=rest
                )
                for exercise, equipment, sets, reps, duration_seconds, alternatives in entries:
                    section_exercises.create_section_exercise(
                        session,
                        section.id,
                        PrimaryExercise(
                            prescription=Prescription(
                                exercise_id=exercise_ids[exercise],
                                equipment_id=equipment_ids.get(equipment),
                                sets=sets,
                                reps=reps,
                                duration_seconds=duration_seconds,
                            ),
                            alternatives=[
                                Prescription(
                                    exercise_id=exercise_ids[alt],
                                    equipment_id=equipment_ids.get(alt_equipment),
                                    sets=alt_sets,
                                    reps=alt_reps,
                                )
                                for alt, alt_equipment, alt_sets, alt_reps in alternatives
                            ],
                        ),
                    )

        result = duplication.duplicate_week(session, plan.id, 1, 2)
        logger.info(f"Seeded plan {plan.name!r} with 2 weeks ({result.counts()} copied).")


if __name__ == "__main__":
    seed()
