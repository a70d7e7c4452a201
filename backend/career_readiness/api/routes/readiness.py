from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from career_readiness.api.deps import get_current_user_id, get_orchestrator
from career_readiness.api.errors import READINESS_ERRORS, to_http_error
from career_readiness.core.ratelimit import recompute_rate_limiter
from career_readiness.schemas.api import ReadinessExplanationOut, RecomputeIn, RecomputeOut
from career_readiness.services.readiness import ReadinessOrchestrator

router = APIRouter(prefix="/user")


@router.post("/readiness/recompute", response_model=RecomputeOut)
def recompute_readiness(
    payload: RecomputeIn,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ReadinessOrchestrator = Depends(get_orchestrator),
):
    if payload.user_id != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    recompute_rate_limiter.check(user_id)
    try:
        return orchestrator.recompute(
            caller_user_id=user_id,
            user_id=payload.user_id,
            career_path_id=payload.career_path_id,
            cycle_number=payload.cycle_number,
            overall_milestone_rate=payload.overall_milestone_rate,
            pillar_milestone_rates=payload.pillar_milestone_rates,
            accepted_opportunity_pillars=payload.accepted_opportunity_pillars,
            engaged_pillars=payload.engaged_pillars,
        )
    except READINESS_ERRORS as exc:
        raise to_http_error(exc) from exc


@router.get("/readiness/{career_path_id}", response_model=ReadinessExplanationOut)
def readiness_explanation(
    career_path_id: UUID,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ReadinessOrchestrator = Depends(get_orchestrator),
):
    try:
        return orchestrator.explain(
            caller_user_id=user_id,
            user_id=user_id,
            career_path_id=career_path_id,
        )
    except READINESS_ERRORS as exc:
        raise to_http_error(exc) from exc
