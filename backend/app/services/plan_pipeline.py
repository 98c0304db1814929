"""Two-facet plan generation: prompt, complete, sanitize, coerce, persist."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from time import perf_counter
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.schemas.plan import DietPlan, GeneratedProgram, PlanRequest, WorkoutPlan
from app.core.config import Settings
from app.core.exceptions import GenerationError, InvalidRequest
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.completion_client import CompletionClient
from app.services.plan_service import create_plan
from app.services.plan_validator import validate_diet_plan, validate_workout_plan
from app.services.prompt_builder import build_diet_prompt, build_workout_prompt
from app.services.response_sanitizer import parse_completion

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of one pipeline stage: either a value or the error that stopped it."""

    stage: str
    value: Optional[T] = None
    error: Optional[GenerationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FacetSpec:
    name: str
    build_prompt: Callable[[PlanRequest], str]
    validate: Callable[[Any], BaseModel]
    temperature: float
    max_tokens: int


def run_stage(stage: str, func: Callable[..., T], *args: Any) -> StageResult[T]:
    try:
        return StageResult(stage=stage, value=func(*args))
    except GenerationError as exc:
        logger.warning("Plan generation stage %s failed: %s", stage, exc)
        return StageResult(stage=stage, error=exc)


def validate_request(payload: Any) -> PlanRequest:
    if isinstance(payload, PlanRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return PlanRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise InvalidRequest(f"Invalid or missing fields: {', '.join(fields)}") from exc


def plan_display_name(fitness_goal: str, created_on: date) -> str:
    return f"{fitness_goal} Plan - {created_on.month}/{created_on.day}/{created_on.year}"


class PlanPipeline:
    """Generate the workout facet, then the diet facet, then store both.

    The facets run strictly in order and the first failing stage ends the run;
    nothing is persisted unless both facets validated.
    """

    def __init__(
        self,
        client: CompletionClient,
        settings: Settings,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._model = settings.llm_model
        self._today = today
        self.facets = (
            FacetSpec(
                name="workout",
                build_prompt=build_workout_prompt,
                validate=validate_workout_plan,
                temperature=settings.workout_temperature,
                max_tokens=settings.workout_max_tokens,
            ),
            FacetSpec(
                name="diet",
                build_prompt=build_diet_prompt,
                validate=validate_diet_plan,
                temperature=settings.diet_temperature,
                max_tokens=settings.diet_max_tokens,
            ),
        )

    def run(self, db: Session, payload: Any, request_id: Optional[str] = None) -> StageResult[GeneratedProgram]:
        start = perf_counter()
        result = self._run(db, payload, request_id)
        latency_ms = (perf_counter() - start) * 1000
        if result.ok:
            log_metric("plan.generate.success", 1, metadata={"request_id": request_id})
        else:
            log_metric("plan.generate.failure", 1, metadata={"stage": result.stage, "request_id": request_id})
        log_metric("plan.generate.latency_ms", latency_ms, metadata={"request_id": request_id})
        return result

    def _run(self, db: Session, payload: Any, request_id: Optional[str]) -> StageResult[GeneratedProgram]:
        request = run_stage("request", validate_request, payload)
        if not request.ok:
            return StageResult(stage=request.stage, error=request.error)
        plan_request: PlanRequest = request.value  # type: ignore[assignment]

        metadata = {
            "user_id": plan_request.user_id,
            "fitness_goal": plan_request.fitness_goal,
            "request_id": request_id,
        }
        with trace("plan.generate", metadata=metadata, user_id=plan_request.user_id, request_id=request_id):
            validated = {}
            for facet in self.facets:
                outcome = self._run_facet(facet, plan_request, request_id)
                if not outcome.ok:
                    return StageResult(stage=outcome.stage, error=outcome.error)
                validated[facet.name] = outcome.value

            return run_stage(
                "persist",
                self._persist,
                db,
                plan_request,
                validated["workout"],
                validated["diet"],
            )

    def _run_facet(self, facet: FacetSpec, request: PlanRequest, request_id: Optional[str]) -> StageResult[BaseModel]:
        prompt = facet.build_prompt(request)
        with trace(f"plan.{facet.name}", metadata={"max_tokens": facet.max_tokens}, request_id=request_id):
            completion = run_stage(f"{facet.name}.completion", self._complete, facet, prompt)
        if not completion.ok:
            return completion  # type: ignore[return-value]

        parsed = run_stage(f"{facet.name}.parse", parse_completion, completion.value)
        if not parsed.ok:
            return parsed  # type: ignore[return-value]

        return run_stage(f"{facet.name}.validate", facet.validate, parsed.value)

    def _complete(self, facet: FacetSpec, prompt: str) -> str:
        return self._client.complete(
            prompt,
            model=self._model,
            temperature=facet.temperature,
            max_tokens=facet.max_tokens,
        )

    def _persist(
        self,
        db: Session,
        request: PlanRequest,
        workout_plan: WorkoutPlan,
        diet_plan: DietPlan,
    ) -> GeneratedProgram:
        try:
            plan = create_plan(
                db,
                user_id=request.user_id,
                workout_plan=workout_plan.model_dump(),
                diet_plan=diet_plan.model_dump(by_alias=True),
                is_active=True,
                name=plan_display_name(request.fitness_goal, self._today()),
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to store generated plan for user_id=%s", request.user_id)
            raise GenerationError("Failed to save plan") from exc
        return GeneratedProgram(plan_id=plan.id, workout_plan=workout_plan, diet_plan=diet_plan)
