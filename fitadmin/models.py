from datetime import datetime, timezone

from sqlmodel import Field, SQLModel

PLAN_CATEGORIES = ("Beginner", "Intermediate", "Advanced")
PLAN_FOCUSES = ("General", "Fat Burning", "Muscle Building", "Combo Plan")
SECTION_NAMES = ("Warm-up", "Main Workout", "Recovery", "Cooldown")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Plan(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
    category: str = Field(index=True)
    focus: str
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class WorkoutDay(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    plan_id: int = Field(foreign_key="plan.id", index=True)
    week_number: int
    day_number: int
    name: str
    duration_est: str | None = None  # free text, e.g. "45 min"
    created_at: datetime = Field(default_factory=utcnow)


class DaySection(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    workout_day_id: int = Field(foreign_key="workoutday.id", index=True)
    name: str
    section_order: int
    rounds: int = 1
    rest_between_rounds_seconds: int | None = None
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class Exercise(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class Equipment(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)


class SectionExercise(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    day_section_id: int = Field(foreign_key="daysection.id", index=True)
    exercise_id: int = Field(foreign_key="exercise.id")
    # Set on alternatives only; points at the primary they substitute for.
    parent_section_exercise_id: int | None = Field(
        default=None, foreign_key="sectionexercise.id", index=True
    )
    exercise_order: int = 1
    equipment_id: int | None = Field(default=None, foreign_key="equipment.id")
    reps: str | None = None  # free text, e.g. "10-12"
    duration_seconds: int | None = None
    sets: int | None = None
    rest_time_seconds: int | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_alternative(self) -> bool:
        return self.parent_section_exercise_id is not None
