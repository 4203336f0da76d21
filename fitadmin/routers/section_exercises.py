from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.routers.equipment import EquipmentRead
from fitadmin.routers.exercises import ExerciseRead
from fitadmin.services import section_exercises
from fitadmin.services.section_exercises import Prescription, SectionExerciseNode

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SectionExerciseRead(SQLModel):
    id: int
    day_section_id: int
    exercise_id: int
    parent_section_exercise_id: int | None
    exercise_order: int
    equipment_id: int | None
    reps: str | None
    duration_seconds: int | None
    sets: int | None
    rest_time_seconds: int | None
    notes: str | None
    created_at: datetime


class SectionExerciseDetailRead(SectionExerciseRead):
    exercise: ExerciseRead | None
    equipment: EquipmentRead | None


class SectionExerciseTreeRead(SectionExerciseDetailRead):
    alternatives: list[SectionExerciseDetailRead]


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PrescriptionBody(SQLModel):
    exercise_id: int
    equipment_id: int | None = None
    reps: str | None = None
    duration_seconds: int | None = None
    sets: int | None = None
    rest_time_seconds: int | None = None
    notes: str | None = None

    def to_prescription(self) -> Prescription:
        return Prescription(
            exercise_id=self.exercise_id,
            equipment_id=self.equipment_id,
            reps=self.reps,
            duration_seconds=self.duration_seconds,
            sets=self.sets,
            rest_time_seconds=self.rest_time_seconds,
            notes=self.notes,
        )


class SectionExerciseUpdate(SQLModel):
    exercise_id: int | None = None
    exercise_order: int | None = None
    equipment_id: int | None = None
    reps: str | None = None
    duration_seconds: int | None = None
    sets: int | None = None
    rest_time_seconds: int | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _detail_fields(node: SectionExerciseNode) -> dict:
    return dict(
        **SectionExerciseRead.model_validate(node.row).model_dump(),
        exercise=ExerciseRead.model_validate(node.exercise) if node.exercise else None,
        equipment=EquipmentRead.model_validate(node.equipment) if node.equipment else None,
    )


def build_tree_read(node: SectionExerciseNode) -> SectionExerciseTreeRead:
    return SectionExerciseTreeRead(
        **_detail_fields(node),
        alternatives=[SectionExerciseDetailRead(**_detail_fields(alt)) for alt in node.alternatives],
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/{id}", response_model=SectionExerciseTreeRead)
def get_section_exercise(id: int, session: SessionDep):
    return build_tree_read(section_exercises.get_section_exercise_tree(session, id))


@router.patch("/{id}", response_model=SectionExerciseRead)
def update_section_exercise(id: int, body: SectionExerciseUpdate, session: SessionDep):
    return section_exercises.update_section_exercise(session, id, body.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=204)
def delete_section_exercise(id: int, session: SessionDep, with_alternatives: bool = True):
    section_exercises.delete_section_exercise(session, id, with_alternatives=with_alternatives)


@router.get("/{id}/alternatives", response_model=list[SectionExerciseRead])
def list_alternatives(id: int, session: SessionDep):
    return section_exercises.list_alternatives(session, id)


@router.post("/{id}/alternatives", response_model=SectionExerciseRead, status_code=201)
def add_alternative(id: int, body: PrescriptionBody, session: SessionDep):
    return section_exercises.add_alternative(session, id, body.to_prescription())
