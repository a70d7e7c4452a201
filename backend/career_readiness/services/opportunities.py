from uuid import UUID

from sqlalchemy.orm import Session

from career_readiness.models.entities import CareerOpportunity, UserUnlock
from career_readiness.services.catalog import fetch_unlock_rules, fetch_user_unlocks
from career_readiness.services.unlocks import unlock_reason


def opportunity_payload(opportunity: CareerOpportunity) -> dict:
    return {
        "id": opportunity.id,
        "career_path_id": opportunity.career_path_id,
        "title": opportunity.title,
        "description": opportunity.description,
        "type": opportunity.type,
        "difficulty_level": opportunity.difficulty_level,
        "external_url": opportunity.external_url,
        "next_action_label": opportunity.next_action_label,
        "next_action_instructions": opportunity.next_action_instructions,
    }


def unlock_payload(unlock: UserUnlock, rules: list) -> dict:
    return {
        "id": unlock.id,
        "opportunity_id": unlock.opportunity_id,
        "unlocked_at": unlock.unlocked_at,
        "seen": unlock.seen,
        "accepted": unlock.accepted,
        "reason": unlock_reason(rules),
        "opportunity": opportunity_payload(unlock.opportunity) if unlock.opportunity else None,
    }


def list_user_unlocks(db: Session, user_id: str) -> list[dict]:
    unlocks = fetch_user_unlocks(db, user_id)
    rules_by_opportunity = fetch_unlock_rules(db, [u.opportunity_id for u in unlocks])
    return [unlock_payload(u, rules_by_opportunity.get(u.opportunity_id, [])) for u in unlocks]


def _owned_unlock(db: Session, user_id: str, unlock_id: UUID) -> UserUnlock | None:
    return (
        db.query(UserUnlock)
        .filter(UserUnlock.id == unlock_id)
        .filter(UserUnlock.user_id == user_id)
        .one_or_none()
    )


def mark_unlock_seen(db: Session, user_id: str, unlock_id: UUID) -> dict | None:
    unlock = _owned_unlock(db, user_id, unlock_id)
    if unlock is None:
        return None
    unlock.seen = True
    db.commit()
    db.refresh(unlock)
    rules = fetch_unlock_rules(db, [unlock.opportunity_id]).get(unlock.opportunity_id, [])
    return unlock_payload(unlock, rules)


def mark_unlock_accepted(db: Session, user_id: str, unlock_id: UUID) -> dict | None:
    unlock = _owned_unlock(db, user_id, unlock_id)
    if unlock is None:
        return None
    unlock.accepted = True
    unlock.seen = True
    db.commit()
    db.refresh(unlock)
    rules = fetch_unlock_rules(db, [unlock.opportunity_id]).get(unlock.opportunity_id, [])
    return unlock_payload(unlock, rules)
