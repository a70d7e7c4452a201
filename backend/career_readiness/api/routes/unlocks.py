from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from career_readiness.api.deps import get_current_user_id, get_db, get_orchestrator
from career_readiness.api.errors import READINESS_ERRORS, to_http_error
from career_readiness.core.ratelimit import recompute_rate_limiter
from career_readiness.schemas.api import EvaluateUnlocksIn, EvaluateUnlocksOut, UserUnlockOut
from career_readiness.services.opportunities import (
    list_user_unlocks,
    mark_unlock_accepted,
    mark_unlock_seen,
)
from career_readiness.services.readiness import ReadinessOrchestrator

router = APIRouter(prefix="/user/unlocks")


@router.post("/evaluate", response_model=EvaluateUnlocksOut)
def evaluate_unlocks(
    payload: EvaluateUnlocksIn,
    user_id: str = Depends(get_current_user_id),
    orchestrator: ReadinessOrchestrator = Depends(get_orchestrator),
):
    if payload.user_id != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    recompute_rate_limiter.check(user_id)
    try:
        new_unlocks = orchestrator.evaluate_unlocks(
            caller_user_id=user_id,
            user_id=payload.user_id,
            career_path_id=payload.career_path_id,
            cycle_number=payload.cycle_number,
            milestone_completion_rate=payload.milestone_completion_rate,
            engaged_pillars=payload.engaged_pillars,
        )
    except READINESS_ERRORS as exc:
        raise to_http_error(exc) from exc
    return {"new_unlocks": new_unlocks}


@router.get("", response_model=List[UserUnlockOut])
def unlocks(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return list_user_unlocks(db, user_id)


@router.post("/{unlock_id}/seen", response_model=UserUnlockOut)
def unlock_seen(
    unlock_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    unlock = mark_unlock_seen(db, user_id, unlock_id)
    if not unlock:
        raise HTTPException(status_code=404, detail="Unlock not found")
    return unlock


@router.post("/{unlock_id}/accepted", response_model=UserUnlockOut)
def unlock_accepted(
    unlock_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    unlock = mark_unlock_accepted(db, user_id, unlock_id)
    if not unlock:
        raise HTTPException(status_code=404, detail="Unlock not found")
    return unlock
