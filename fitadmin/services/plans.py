from loguru import logger
from sqlmodel import Session, select

from fitadmin.database import atomic
from fitadmin.errors import NotFound, ValidationError
from fitadmin.models import PLAN_CATEGORIES, PLAN_FOCUSES, Plan
from fitadmin.services import workout_days
from fitadmin.services.validation import reject_unknown_fields, require_choice, require_name

UPDATABLE_FIELDS = {"name", "category", "focus", "description"}


def _validate(values: dict) -> None:
    require_name(values.get("name"), "Plan name")
    require_choice(values.get("category"), PLAN_CATEGORIES, "Category")
    require_choice(values.get("focus"), PLAN_FOCUSES, "Focus")
    # Beginner plans only come in the General flavour.
    if values["category"] == "Beginner" and values["focus"] != "General":
        raise ValidationError("Beginner plans must have the General focus")


def get_plan(session: Session, plan_id: int) -> Plan:
    plan = session.get(Plan, plan_id)
    if plan is None:
        raise NotFound("Plan", plan_id)
    return plan


def list_plans(session: Session) -> list[Plan]:
    return session.exec(select(Plan).order_by(Plan.created_at.desc(), Plan.id.desc())).all()


def create_plan(
    session: Session,
    name: str,
    category: str,
    focus: str,
    description: str | None = None,
) -> Plan:
    _validate(dict(name=name, category=category, focus=focus))

    plan = Plan(name=name.strip(), category=category, focus=focus, description=description or None)
    with atomic(session, "Create plan"):
        session.add(plan)

    session.refresh(plan)
    logger.info(f"Created plan id={plan.id} ({plan.name!r}, {plan.category}/{plan.focus})")
    return plan


def update_plan(session: Session, plan_id: int, changes: dict) -> Plan:
    plan = get_plan(session, plan_id)
    reject_unknown_fields(changes, UPDATABLE_FIELDS, "plan")

    merged = {name: getattr(plan, name) for name in UPDATABLE_FIELDS}
    merged.update(changes)
    _validate(merged)

    with atomic(session, "Update plan"):
        for name, value in changes.items():
            if name == "name":
                value = value.strip()
            elif name == "description":
                value = value or None
            setattr(plan, name, value)
        session.add(plan)

    session.refresh(plan)
    return plan


def delete_plan(session: Session, plan_id: int) -> None:
    """Delete a plan and its whole day/section/exercise tree in one transaction."""
    plan = get_plan(session, plan_id)
    with atomic(session, "Delete plan"):
        removed = workout_days.delete_for_plan(session, plan.id)
        session.delete(plan)
    logger.info(f"Deleted plan id={plan_id} and {removed} workout day(s)")
