"""Coerce loosely typed model output into strict plan objects.

These are projections, not rejecting validators: every nested value is rebuilt
field by field with a typed fallback, so a plan with a stray string where a
number belongs still comes out usable. Only a top level that is not a JSON
object is refused.
"""
from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Union

from app.api.schemas.plan import DietPlan, ExerciseDay, Meal, Routine, WorkoutPlan
from app.core.exceptions import StructuralMismatch
from app.services.response_sanitizer import LooseValue

DEFAULT_SETS = 1
DEFAULT_REPS = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_NUMBER = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)")


def validate_workout_plan(parsed: LooseValue) -> WorkoutPlan:
    plan = _require_object(parsed, "workout")
    return WorkoutPlan(
        schedule=_text_list(plan.get("schedule")),
        exercises=[_exercise_day(item) for item in _object_list(plan.get("exercises"))],
    )


def validate_diet_plan(parsed: LooseValue) -> DietPlan:
    plan = _require_object(parsed, "diet")
    calories = plan.get("dailyCalories", plan.get("daily_calories"))
    return DietPlan(
        daily_calories=coerce_number(calories),
        meals=[_meal(item) for item in _object_list(plan.get("meals"))],
    )


def coerce_count(value: Any, default: int) -> int:
    """Positive integer from a number or a string with leading digits, else ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 1 else default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        count = int(value)
        return count if count >= 1 else default
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return default
        try:
            count = int(match.group(1))
        except ValueError:
            # More digits than int() accepts from a string.
            return default
        return count if count >= 1 else default
    return default


def coerce_number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.replace(",", ""))
        if not match:
            return None
        number = float(match.group(1))
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def _require_object(parsed: LooseValue, facet: str) -> dict:
    if not isinstance(parsed, dict):
        raise StructuralMismatch(f"Expected a JSON object for the {facet} plan, got {type(parsed).__name__}")
    return parsed


def _exercise_day(item: dict) -> ExerciseDay:
    return ExerciseDay(
        day=_text(item.get("day")),
        routines=[_routine(routine) for routine in _object_list(item.get("routines"))],
    )


def _routine(item: dict) -> Routine:
    return Routine(
        name=_text(item.get("name")),
        sets=coerce_count(item.get("sets"), DEFAULT_SETS),
        reps=coerce_count(item.get("reps"), DEFAULT_REPS),
    )


def _meal(item: dict) -> Meal:
    return Meal(name=_text(item.get("name")), foods=_text_list(item.get("foods")))


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [_text(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]


def _object_list(value: Any) -> List[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
