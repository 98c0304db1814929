"""Schemas for plan generation requests and generated plans."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

Measurement = Union[int, float, str]


class PlanRequest(BaseModel):
    """Payload posted by the voice assistant once the intake call ends."""

    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(..., min_length=1)
    age: Measurement
    height: Measurement
    weight: Measurement
    injuries: str = "None"
    workout_days: Measurement
    fitness_goal: str = Field(..., min_length=1)
    fitness_level: str = Field(..., min_length=1)
    dietary_restrictions: str = "None"

    @field_validator("injuries", "dietary_restrictions", mode="before")
    @classmethod
    def _none_when_null(cls, value):
        return "None" if value is None else value


class Routine(BaseModel):
    name: str
    sets: int = Field(..., ge=1)
    reps: int = Field(..., ge=1)


class ExerciseDay(BaseModel):
    day: str
    routines: List[Routine] = Field(default_factory=list)


class WorkoutPlan(BaseModel):
    schedule: List[str] = Field(default_factory=list)
    exercises: List[ExerciseDay] = Field(default_factory=list)


class Meal(BaseModel):
    name: str
    foods: List[str] = Field(default_factory=list)


class DietPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    daily_calories: Optional[Union[int, float]] = Field(default=None, alias="dailyCalories")
    meals: List[Meal] = Field(default_factory=list)


class GeneratedProgram(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_id: UUID = Field(..., alias="planId")
    workout_plan: WorkoutPlan = Field(..., alias="workoutPlan")
    diet_plan: DietPlan = Field(..., alias="dietPlan")


class GenerateProgramResponse(BaseModel):
    success: bool
    data: Optional[GeneratedProgram] = None
    error: Optional[str] = None


class PlanSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    user_id: str = Field(..., alias="userId")
    name: str
    is_active: bool = Field(..., alias="isActive")
    workout_plan: WorkoutPlan = Field(..., alias="workoutPlan")
    diet_plan: DietPlan = Field(..., alias="dietPlan")
    created_at: datetime = Field(..., alias="createdAt")


class PlanListResponse(BaseModel):
    plans: List[PlanSummary]
    request_id: str
