from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from career_readiness.api.deps import get_db
from career_readiness.schemas.api import OpportunityOut, PillarOut
from career_readiness.services.catalog import fetch_opportunities, fetch_pillars, normalize_weights
from career_readiness.services.opportunities import opportunity_payload

router = APIRouter(prefix="/careers")


@router.get("/{career_path_id}/pillars", response_model=List[PillarOut])
def list_pillars(career_path_id: UUID, db: Session = Depends(get_db)):
    return [
        {
            "id": pillar.id,
            "name": pillar.name,
            "weight": pillar.weight,
            "normalized_weight": round(weight, 4),
        }
        for pillar, weight in normalize_weights(fetch_pillars(db, career_path_id))
    ]


@router.get("/{career_path_id}/opportunities", response_model=List[OpportunityOut])
def list_opportunities(career_path_id: UUID, db: Session = Depends(get_db)):
    return [opportunity_payload(o) for o in fetch_opportunities(db, career_path_id)]
