"""Persistence helpers for generated plans."""
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.db.models.plan import Plan


def create_plan(
    db: Session,
    *,
    user_id: str,
    workout_plan: Dict[str, Any],
    diet_plan: Dict[str, Any],
    is_active: bool = True,
    name: str,
) -> Plan:
    """Store a new plan; an active plan supersedes the user's previous ones."""
    if is_active:
        (
            db.query(Plan)
            .filter(Plan.user_id == user_id, Plan.is_active.is_(True))
            .update({Plan.is_active: False}, synchronize_session=False)
        )

    plan = Plan(
        user_id=user_id,
        workout_plan=workout_plan,
        diet_plan=diet_plan,
        is_active=is_active,
        name=name,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


def list_user_plans(db: Session, user_id: str) -> List[Plan]:
    return (
        db.query(Plan)
        .filter(Plan.user_id == user_id)
        .order_by(Plan.created_at.desc(), Plan.id.desc())
        .all()
    )
