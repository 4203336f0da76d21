import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import DaySection, Exercise, SectionExercise, WorkoutDay
from fitadmin.services import plans, workout_days


@pytest.fixture(name="plan_id")
def plan_fixture(session: Session) -> int:
    return plans.create_plan(session, "Beginner Full Body", "Beginner", "General").id


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


def test_list_is_ordered_by_week_then_day(session: Session, plan_id: int):
    for week, day in [(2, 3), (1, 2), (2, 1), (1, 1), (3, 1), (1, 3)]:
        workout_days.create_workout_day(session, plan_id, week, day, f"W{week}D{day}")

    days = workout_days.list_workout_days(session, plan_id)
    keys = [(d.week_number, d.day_number) for d in days]
    assert keys == sorted(keys)
    assert keys[0] == (1, 1)
    assert keys[-1] == (3, 1)


def test_list_only_returns_own_plan(session: Session, plan_id: int):
    other = plans.create_plan(session, "Other", "Advanced", "Combo Plan")
    workout_days.create_workout_day(session, plan_id, 1, 1, "Mine")
    workout_days.create_workout_day(session, other.id, 1, 1, "Theirs")
    assert [d.name for d in workout_days.list_workout_days(session, plan_id)] == ["Mine"]


def test_list_unknown_plan(session: Session):
    with pytest.raises(NotFound):
        workout_days.list_workout_days(session, 999)


def test_create_unknown_plan(session: Session):
    with pytest.raises(NotFound):
        workout_days.create_workout_day(session, 999, 1, 1, "Day 1")


@pytest.mark.parametrize(
    "week, day, name",
    [(0, 1, "Day"), (1, 0, "Day"), (1, 1, ""), (-2, 1, "Day"), (10**20, 1, "Day"), (1, 2**63, "Day")],
)
def test_create_validation(session: Session, plan_id: int, week: int, day: int, name: str):
    with pytest.raises(ValidationError):
        workout_days.create_workout_day(session, plan_id, week, day, name)
    assert session.exec(select(WorkoutDay)).all() == []


def test_group_by_week(session: Session, plan_id: int):
    for week, day in [(2, 2), (1, 2), (2, 1), (1, 1)]:
        workout_days.create_workout_day(session, plan_id, week, day, f"W{week}D{day}")

    weeks = workout_days.group_by_week(session.exec(select(WorkoutDay)).all())
    assert list(weeks) == [1, 2]
    assert [d.day_number for d in weeks[1]] == [1, 2]
    assert [d.day_number for d in weeks[2]] == [1, 2]


def test_group_by_week_empty():
    assert workout_days.group_by_week([]) == {}


def test_next_week_number(session: Session, plan_id: int):
    assert workout_days.next_week_number(session, plan_id) == 1
    workout_days.create_workout_day(session, plan_id, 3, 1, "Day 1")
    assert workout_days.next_week_number(session, plan_id) == 4


def test_update_cannot_move_day_to_another_plan(session: Session, plan_id: int):
    day = workout_days.create_workout_day(session, plan_id, 1, 1, "Day 1")
    with pytest.raises(ValidationError):
        workout_days.update_workout_day(session, day.id, {"plan_id": 42})


def test_delete_cascades(session: Session, plan_id: int):
    day = workout_days.create_workout_day(session, plan_id, 1, 1, "Day 1")
    keep = workout_days.create_workout_day(session, plan_id, 1, 2, "Day 2")
    section = DaySection(workout_day_id=day.id, name="Warm-up", section_order=1)
    kept_section = DaySection(workout_day_id=keep.id, name="Warm-up", section_order=1)
    session.add_all([section, kept_section])
    session.commit()
    squat = Exercise(name="Squat")
    session.add(squat)
    session.commit()
    session.add(SectionExercise(day_section_id=section.id, exercise_id=squat.id))
    session.commit()

    workout_days.delete_workout_day(session, day.id)

    assert session.get(WorkoutDay, day.id) is None
    assert [s.workout_day_id for s in session.exec(select(DaySection)).all()] == [keep.id]
    assert session.exec(select(SectionExercise)).all() == []


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def test_create_and_list_days(client: TestClient, plan_id: int):
    response = client.post(
        f"/api/plans/{plan_id}/days",
        json={"week_number": 1, "day_number": 1, "name": "Day 1", "duration_est": "40 min"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["plan_id"] == plan_id
    assert body["duration_est"] == "40 min"

    listing = client.get(f"/api/plans/{plan_id}/days")
    assert listing.status_code == 200
    assert [d["id"] for d in listing.json()] == [body["id"]]


def test_create_day_for_missing_plan(client: TestClient):
    response = client.post(
        "/api/plans/99999/days", json={"week_number": 1, "day_number": 1, "name": "Day 1"}
    )
    assert response.status_code == 404


def test_create_day_with_oversized_week(client: TestClient, plan_id: int):
    response = client.post(
        f"/api/plans/{plan_id}/days", json={"week_number": 10**20, "day_number": 1, "name": "Day 1"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Week number must be at most 9223372036854775807"


def test_weekly_overview(client: TestClient, plan_id: int):
    for week, day in [(2, 1), (1, 2), (1, 1)]:
        client.post(
            f"/api/plans/{plan_id}/days",
            json={"week_number": week, "day_number": day, "name": f"W{week}D{day}"},
        )

    response = client.get(f"/api/plans/{plan_id}/weeks")
    assert response.status_code == 200
    weeks = response.json()
    assert [w["week_number"] for w in weeks] == [1, 2]
    assert [d["name"] for d in weeks[0]["days"]] == ["W1D1", "W1D2"]
    assert [d["name"] for d in weeks[1]["days"]] == ["W2D1"]


def test_patch_day(client: TestClient, plan_id: int):
    day_id = client.post(
        f"/api/plans/{plan_id}/days", json={"week_number": 1, "day_number": 1, "name": "Day 1"}
    ).json()["id"]

    response = client.patch(f"/api/workout-days/{day_id}", json={"name": "Push Day", "day_number": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Push Day"
    assert body["day_number"] == 2
    assert body["week_number"] == 1


def test_patch_day_invalid(client: TestClient, plan_id: int):
    day_id = client.post(
        f"/api/plans/{plan_id}/days", json={"week_number": 1, "day_number": 1, "name": "Day 1"}
    ).json()["id"]
    response = client.patch(f"/api/workout-days/{day_id}", json={"week_number": 0})
    assert response.status_code == 400


def test_delete_day(client: TestClient, plan_id: int):
    day_id = client.post(
        f"/api/plans/{plan_id}/days", json={"week_number": 1, "day_number": 1, "name": "Day 1"}
    ).json()["id"]
    assert client.delete(f"/api/workout-days/{day_id}").status_code == 204
    assert client.get(f"/api/workout-days/{day_id}").status_code == 404
    assert client.delete(f"/api/workout-days/{day_id}").status_code == 404
