"""Prompt templates for the workout and diet facets of a plan."""
from __future__ import annotations

from app.api.schemas.plan import PlanRequest

WORKOUT_EXAMPLE = """{
  "schedule": ["Monday"],
  "exercises": [
    {
      "day": "Monday",
      "routines": [
        { "name": "Exercise", "sets": 3, "reps": 10 }
      ]
    }
  ]
}"""

DIET_EXAMPLE = """{
  "dailyCalories": 2000,
  "meals": [
    { "name": "Breakfast", "foods": ["Food"] }
  ]
}"""


def build_workout_prompt(request: PlanRequest) -> str:
    return (
        "You are an experienced fitness coach creating a personalized workout plan based on:\n"
        f"Age: {request.age}\n"
        f"Height: {request.height}\n"
        f"Weight: {request.weight}\n"
        f"Injuries or limitations: {request.injuries}\n"
        f"Available days for workout: {request.workout_days}\n"
        f"Fitness goal: {request.fitness_goal}\n"
        f"Fitness level: {request.fitness_level}\n\n"
        "Return ONLY valid JSON with this exact structure:\n"
        f"{WORKOUT_EXAMPLE}"
    )


def build_diet_prompt(request: PlanRequest) -> str:
    return (
        "You are an experienced nutrition coach creating a personalized diet plan based on:\n"
        f"Age: {request.age}\n"
        f"Height: {request.height}\n"
        f"Weight: {request.weight}\n"
        f"Fitness goal: {request.fitness_goal}\n"
        f"Dietary restrictions: {request.dietary_restrictions}\n\n"
        "Return ONLY valid JSON with this exact structure:\n"
        f"{DIET_EXAMPLE}"
    )
