"""Section exercise composer: primaries, one-level alternatives and their lifecycle."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

import fitadmin.services.section_exercises as composer
from fitadmin.errors import BackendError, NotFound, ValidationError
from fitadmin.models import SectionExercise
from fitadmin.services import catalog, day_sections, plans, workout_days
from fitadmin.services.section_exercises import Prescription, PrimaryExercise


@pytest.fixture(name="section_id")
def section_fixture(session: Session) -> int:
    plan = plans.create_plan(session, "Beginner Full Body", "Beginner", "General")
    day = workout_days.create_workout_day(session, plan.id, 1, 1, "Day 1")
    return day_sections.create_day_section(session, day.id, "Main Workout", rounds=3).id


@pytest.fixture(name="exercises")
def exercises_fixture(session: Session) -> dict[str, int]:
    names = ["Push-up", "Knee Push-up", "Incline Push-up", "Squat"]
    return {name: catalog.create_exercise(session, name).id for name in names}


def _all_rows(session: Session) -> list[SectionExercise]:
    return session.exec(select(SectionExercise)).all()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_create_with_alternatives_writes_n_plus_one_rows(
    session: Session, section_id: int, exercises: dict[str, int]
):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"], sets=3, reps="10-12"),
            alternatives=[
                Prescription(exercise_id=exercises["Knee Push-up"], sets=3, reps="10-12"),
                Prescription(exercise_id=exercises["Incline Push-up"], sets=3, reps="8"),
            ],
        ),
    )

    rows = _all_rows(session)
    assert len(rows) == 3
    alternatives = [r for r in rows if r.is_alternative]
    assert len(alternatives) == 2
    assert all(r.parent_section_exercise_id == node.row.id for r in alternatives)
    assert node.row.id not in (None, 0)
    assert [a.row.exercise_order for a in node.alternatives] == [1, 2]


def test_create_roundtrip_through_list(session: Session, section_id: int, exercises: dict[str, int]):
    equipment = catalog.create_equipment(session, "Mat")
    composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(
                exercise_id=exercises["Push-up"],
                equipment_id=equipment.id,
                sets=3,
                reps="10-12",
                rest_time_seconds=60,
                notes="Keep elbows tucked",
            ),
            exercise_order=1,
            alternatives=[Prescription(exercise_id=exercises["Knee Push-up"], sets=3, reps="10-12")],
        ),
    )

    [node] = composer.list_section_exercises(session, section_id)
    assert node.row.exercise_id == exercises["Push-up"]
    assert node.row.equipment_id == equipment.id
    assert node.row.sets == 3
    assert node.row.reps == "10-12"
    assert node.row.duration_seconds is None
    assert node.row.rest_time_seconds == 60
    assert node.row.notes == "Keep elbows tucked"
    assert node.row.exercise_order == 1
    assert node.exercise.name == "Push-up"
    assert node.equipment.name == "Mat"

    [alternative] = node.alternatives
    assert alternative.row.exercise_id == exercises["Knee Push-up"]
    assert alternative.row.sets == 3
    assert alternative.row.reps == "10-12"
    assert alternative.exercise.name == "Knee Push-up"
    assert alternative.alternatives == []


def test_list_excludes_alternatives_from_top_level(
    session: Session, section_id: int, exercises: dict[str, int]
):
    for name in ("Push-up", "Squat"):
        composer.create_section_exercise(
            session,
            section_id,
            PrimaryExercise(
                prescription=Prescription(exercise_id=exercises[name]),
                alternatives=[Prescription(exercise_id=exercises["Knee Push-up"])],
            ),
        )

    nodes = composer.list_section_exercises(session, section_id)
    assert [n.exercise.name for n in nodes] == ["Push-up", "Squat"]
    assert [n.row.exercise_order for n in nodes] == [1, 2]
    assert all(len(n.alternatives) == 1 for n in nodes)


def test_create_in_missing_section(session: Session, exercises: dict[str, int]):
    with pytest.raises(NotFound):
        composer.create_section_exercise(
            session, 999, PrimaryExercise(prescription=Prescription(exercise_id=exercises["Squat"]))
        )


@pytest.mark.parametrize(
    "overrides",
    [
        {"sets": 0},
        {"duration_seconds": -1},
        {"rest_time_seconds": -10},
        {"exercise_id": 999},
        {"exercise_id": 10**20},
        {"sets": 2**63},
    ],
)
def test_create_validation(
    session: Session, section_id: int, exercises: dict[str, int], overrides: dict
):
    values = {"exercise_id": exercises["Squat"], **overrides}
    with pytest.raises(ValidationError):
        composer.create_section_exercise(
            session, section_id, PrimaryExercise(prescription=Prescription(**values))
        )
    assert _all_rows(session) == []


def test_invalid_alternative_rejects_whole_batch(
    session: Session, section_id: int, exercises: dict[str, int]
):
    with pytest.raises(ValidationError):
        composer.create_section_exercise(
            session,
            section_id,
            PrimaryExercise(
                prescription=Prescription(exercise_id=exercises["Push-up"]),
                alternatives=[Prescription(exercise_id=exercises["Knee Push-up"], sets=0)],
            ),
        )
    assert _all_rows(session) == []


def test_backend_failure_on_alternative_rolls_back_primary(
    session: Session, section_id: int, exercises: dict[str, int], monkeypatch: pytest.MonkeyPatch
):
    real_insert = composer._insert

    def failing_insert(session, day_section_id, prescription, exercise_order, parent_id=None):
        if parent_id is not None:
            raise OperationalError("INSERT INTO sectionexercise", {}, Exception("disk I/O error"))
        return real_insert(session, day_section_id, prescription, exercise_order, parent_id)

    monkeypatch.setattr(composer, "_insert", failing_insert)

    with pytest.raises(BackendError):
        composer.create_section_exercise(
            session,
            section_id,
            PrimaryExercise(
                prescription=Prescription(exercise_id=exercises["Push-up"]),
                alternatives=[Prescription(exercise_id=exercises["Knee Push-up"])],
            ),
        )
    assert _all_rows(session) == []


# ---------------------------------------------------------------------------
# Alternatives
# ---------------------------------------------------------------------------


def test_add_alternative(session: Session, section_id: int, exercises: dict[str, int]):
    node = composer.create_section_exercise(
        session, section_id, PrimaryExercise(prescription=Prescription(exercise_id=exercises["Push-up"]))
    )
    first = composer.add_alternative(session, node.row.id, Prescription(exercise_id=exercises["Knee Push-up"]))
    second = composer.add_alternative(session, node.row.id, Prescription(exercise_id=exercises["Incline Push-up"]))

    assert first.parent_section_exercise_id == node.row.id
    assert first.day_section_id == section_id
    assert (first.exercise_order, second.exercise_order) == (1, 2)
    assert [a.id for a in composer.list_alternatives(session, node.row.id)] == [first.id, second.id]


def test_alternative_of_alternative_is_rejected(
    session: Session, section_id: int, exercises: dict[str, int]
):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"]),
            alternatives=[Prescription(exercise_id=exercises["Knee Push-up"])],
        ),
    )
    alternative_id = node.alternatives[0].row.id

    with pytest.raises(ValidationError):
        composer.add_alternative(session, alternative_id, Prescription(exercise_id=exercises["Squat"]))
    assert len(_all_rows(session)) == 2


def test_add_alternative_to_missing_parent(session: Session, exercises: dict[str, int]):
    with pytest.raises(NotFound):
        composer.add_alternative(session, 999, Prescription(exercise_id=exercises["Squat"]))


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


def test_update_touches_only_one_row(session: Session, section_id: int, exercises: dict[str, int]):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"], sets=3),
            alternatives=[Prescription(exercise_id=exercises["Knee Push-up"], sets=3)],
        ),
    )

    updated = composer.update_section_exercise(session, node.row.id, {"sets": 5, "reps": "5"})
    assert updated.sets == 5
    assert updated.reps == "5"
    assert composer.get_section_exercise(session, node.alternatives[0].row.id).sets == 3


def test_update_rejects_reparenting(session: Session, section_id: int, exercises: dict[str, int]):
    node = composer.create_section_exercise(
        session, section_id, PrimaryExercise(prescription=Prescription(exercise_id=exercises["Squat"]))
    )
    with pytest.raises(ValidationError):
        composer.update_section_exercise(session, node.row.id, {"parent_section_exercise_id": 1})
    with pytest.raises(ValidationError):
        composer.update_section_exercise(session, node.row.id, {"sets": 0})


def test_delete_primary_removes_its_alternatives(
    session: Session, section_id: int, exercises: dict[str, int]
):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"]),
            alternatives=[
                Prescription(exercise_id=exercises["Knee Push-up"]),
                Prescription(exercise_id=exercises["Incline Push-up"]),
            ],
        ),
    )
    keep = composer.create_section_exercise(
        session, section_id, PrimaryExercise(prescription=Prescription(exercise_id=exercises["Squat"]))
    )

    composer.delete_section_exercise(session, node.row.id)

    assert [r.id for r in _all_rows(session)] == [keep.row.id]


def test_delete_primary_without_alternatives_flag_refuses(
    session: Session, section_id: int, exercises: dict[str, int]
):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"]),
            alternatives=[Prescription(exercise_id=exercises["Knee Push-up"])],
        ),
    )
    with pytest.raises(ValidationError):
        composer.delete_section_exercise(session, node.row.id, with_alternatives=False)
    assert len(_all_rows(session)) == 2


def test_delete_alternative_only_removes_that_row(
    session: Session, section_id: int, exercises: dict[str, int]
):
    node = composer.create_section_exercise(
        session,
        section_id,
        PrimaryExercise(
            prescription=Prescription(exercise_id=exercises["Push-up"]),
            alternatives=[Prescription(exercise_id=exercises["Knee Push-up"])],
        ),
    )
    composer.delete_section_exercise(session, node.alternatives[0].row.id)
    assert [r.id for r in _all_rows(session)] == [node.row.id]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def test_create_and_list_route(client: TestClient, section_id: int, exercises: dict[str, int]):
    response = client.post(
        f"/api/day-sections/{section_id}/exercises",
        json={
            "exercise_id": exercises["Push-up"],
            "sets": 3,
            "reps": "10-12",
            "alternatives": [{"exercise_id": exercises["Knee Push-up"], "sets": 3, "reps": "10-12"}],
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["exercise"]["name"] == "Push-up"
    assert body["equipment"] is None
    assert body["parent_section_exercise_id"] is None
    assert len(body["alternatives"]) == 1
    assert body["alternatives"][0]["parent_section_exercise_id"] == body["id"]
    assert body["alternatives"][0]["exercise"]["name"] == "Knee Push-up"

    listing = client.get(f"/api/day-sections/{section_id}/exercises")
    assert listing.status_code == 200
    assert [e["id"] for e in listing.json()] == [body["id"]]


def test_create_route_unknown_exercise(client: TestClient, section_id: int):
    response = client.post(f"/api/day-sections/{section_id}/exercises", json={"exercise_id": 999})
    assert response.status_code == 400
    assert response.json()["detail"] == "Exercise with id 999 does not exist"


def test_alternative_routes(client: TestClient, section_id: int, exercises: dict[str, int]):
    primary_id = client.post(
        f"/api/day-sections/{section_id}/exercises", json={"exercise_id": exercises["Push-up"]}
    ).json()["id"]

    response = client.post(
        f"/api/section-exercises/{primary_id}/alternatives",
        json={"exercise_id": exercises["Knee Push-up"], "reps": "8"},
    )
    assert response.status_code == 201
    alternative_id = response.json()["id"]

    nested = client.post(
        f"/api/section-exercises/{alternative_id}/alternatives",
        json={"exercise_id": exercises["Squat"]},
    )
    assert nested.status_code == 400

    listing = client.get(f"/api/section-exercises/{primary_id}/alternatives")
    assert [a["id"] for a in listing.json()] == [alternative_id]

    refused = client.delete(f"/api/section-exercises/{primary_id}?with_alternatives=false")
    assert refused.status_code == 400

    assert client.delete(f"/api/section-exercises/{primary_id}").status_code == 204
    assert client.get(f"/api/section-exercises/{alternative_id}").status_code == 404


def test_patch_route(client: TestClient, section_id: int, exercises: dict[str, int]):
    primary_id = client.post(
        f"/api/day-sections/{section_id}/exercises", json={"exercise_id": exercises["Squat"]}
    ).json()["id"]
    response = client.patch(
        f"/api/section-exercises/{primary_id}", json={"duration_seconds": 45, "notes": ""}
    )
    assert response.status_code == 200
    assert response.json()["duration_seconds"] == 45
    assert response.json()["notes"] is None
