from collections import defaultdict
from typing import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from career_readiness.models.entities import (
    CareerOpportunity,
    CareerPillar,
    PillarProgress,
    UnlockRule,
    UserReadiness,
    UserUnlock,
)


def fetch_pillars(db: Session, career_path_id: UUID) -> list[CareerPillar]:
    """Pillars of a career path in catalog order.

    Catalog order decides strongest/weakest ties, so it has to be stable.
    """
    return (
        db.query(CareerPillar)
        .filter(CareerPillar.career_path_id == career_path_id)
        .order_by(CareerPillar.display_order.asc(), CareerPillar.name.asc(), CareerPillar.id.asc())
        .all()
    )


def normalize_weights(pillars: Iterable[CareerPillar]) -> list[tuple[CareerPillar, float]]:
    pillars = list(pillars)
    if not pillars:
        return []
    weight_sum = sum(float(p.weight or 0.0) for p in pillars)
    if weight_sum <= 0:
        return [(p, 1 / len(pillars)) for p in pillars]
    return [(p, float(p.weight or 0.0) / weight_sum) for p in pillars]


def fetch_pillar_progress(db: Session, user_id: str, pillar_ids: list[UUID]) -> dict[UUID, PillarProgress]:
    if not pillar_ids:
        return {}
    rows = (
        db.query(PillarProgress)
        .filter(PillarProgress.user_id == user_id)
        .filter(PillarProgress.career_pillar_id.in_(pillar_ids))
        .all()
    )
    return {row.career_pillar_id: row for row in rows}


def fetch_readiness(db: Session, user_id: str, career_path_id: UUID) -> UserReadiness | None:
    return (
        db.query(UserReadiness)
        .filter(UserReadiness.user_id == user_id)
        .filter(UserReadiness.career_path_id == career_path_id)
        .one_or_none()
    )


def fetch_opportunities(db: Session, career_path_id: UUID) -> list[CareerOpportunity]:
    return (
        db.query(CareerOpportunity)
        .filter(CareerOpportunity.career_path_id == career_path_id)
        .filter(CareerOpportunity.is_active.is_(True))
        .order_by(CareerOpportunity.difficulty_level.asc(), CareerOpportunity.title.asc())
        .all()
    )


def fetch_unlock_rules(db: Session, opportunity_ids: list[UUID]) -> dict[UUID, list[UnlockRule]]:
    if not opportunity_ids:
        return {}
    rules = (
        db.query(UnlockRule)
        .filter(UnlockRule.opportunity_id.in_(opportunity_ids))
        .order_by(UnlockRule.created_at.asc(), UnlockRule.id.asc())
        .all()
    )
    rules_by_opportunity: dict[UUID, list[UnlockRule]] = defaultdict(list)
    for rule in rules:
        rules_by_opportunity[rule.opportunity_id].append(rule)
    return dict(rules_by_opportunity)


def fetch_user_unlocks(db: Session, user_id: str) -> list[UserUnlock]:
    return (
        db.query(UserUnlock)
        .filter(UserUnlock.user_id == user_id)
        .order_by(UserUnlock.unlocked_at.desc())
        .all()
    )
