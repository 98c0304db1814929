"""Plan generation and retrieval routes."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.api.dependencies import get_plan_pipeline
from app.api.schemas.plan import DietPlan, GenerateProgramResponse, PlanListResponse, PlanSummary, WorkoutPlan
from app.core.exceptions import InvalidRequest
from app.db.deps import get_db
from app.services.plan_pipeline import PlanPipeline
from app.services.plan_service import list_user_plans

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/vapi/generate-program", response_model=GenerateProgramResponse, tags=["plans"])
async def generate_program(
    request: Request,
    db: Session = Depends(get_db),
    pipeline: PlanPipeline = Depends(get_plan_pipeline),
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    try:
        payload: Any = json.loads(await request.body())
    except ValueError:
        return _failure(InvalidRequest("Request body must be valid JSON"), status.HTTP_400_BAD_REQUEST)

    logger.info("Plan generation requested (request_id=%s): %s", request_id, payload)
    try:
        result = await run_in_threadpool(pipeline.run, db, payload, request_id)
    except Exception as exc:
        logger.exception("Error generating fitness plan")
        return _failure(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not result.ok:
        code = status.HTTP_400_BAD_REQUEST if isinstance(result.error, InvalidRequest) else status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error("Error generating fitness plan at stage %s: %s", result.stage, result.error)
        return _failure(result.error, code)

    body = GenerateProgramResponse(success=True, data=result.value)
    return JSONResponse(body.model_dump(mode="json", by_alias=True, exclude={"error"}), status_code=status.HTTP_200_OK)


@router.get("/plans", response_model=PlanListResponse, tags=["plans"])
def get_user_plans(
    request: Request,
    user_id: str = Query(..., min_length=1, description="Identity-provider user id"),
    db: Session = Depends(get_db),
) -> PlanListResponse:
    request_id = getattr(request.state, "request_id", None)
    plans = list_user_plans(db, user_id)
    return PlanListResponse(
        plans=[
            PlanSummary(
                id=plan.id,
                user_id=plan.user_id,
                name=plan.name,
                is_active=bool(plan.is_active),
                workout_plan=WorkoutPlan.model_validate(plan.workout_plan),
                diet_plan=DietPlan.model_validate(plan.diet_plan),
                created_at=plan.created_at,
            )
            for plan in plans
        ],
        request_id=request_id or "",
    )


def _failure(error: BaseException | None, status_code: int) -> JSONResponse:
    message = str(error) if error is not None else ""
    body = GenerateProgramResponse(success=False, error=message or "Plan generation failed")
    return JSONResponse(body.model_dump(mode="json", exclude={"data"}), status_code=status_code)
