"""Career readiness scoring.

Each pillar of a career path is scored from three signals::

    pillar = milestone_rate * 0.5 + cycle_rate * 0.3 + opportunity * 0.2

where ``cycle_rate`` saturates after ``CYCLE_HORIZON`` cycles and
``opportunity`` is 100 when the student accepted an opportunity tagged with the
pillar. The overall score is the weighted mean of pillar scores using the
catalog weights normalized to sum to 1.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from career_readiness.models.entities import PillarProgress, UserReadiness
from career_readiness.services.catalog import (
    fetch_pillar_progress,
    fetch_pillars,
    fetch_readiness,
    normalize_weights,
)
from career_readiness.services.errors import ReadinessInputError, ReadinessUnavailableError

logger = logging.getLogger(__name__)

MILESTONE_WEIGHT = 0.5
CYCLE_WEIGHT = 0.3
OPPORTUNITY_WEIGHT = 0.2
CYCLE_HORIZON = 3
MAX_CYCLE_NUMBER = 100
# Matches the String(120) user_id columns.
MAX_USER_ID_LENGTH = 120

DEFAULT_RECOMMENDATION = "General Exploration"
EMPTY_CATALOG_REASON = "Start your first cycle to begin building career readiness."
BALANCED_REASON = "Continue building across all pillars."


@dataclass(frozen=True)
class ScoringContext:
    user_id: str
    career_path_id: UUID
    cycle_number: int
    overall_milestone_rate: float
    pillar_milestone_rates: dict[str, float] = field(default_factory=dict)
    accepted_opportunity_pillars: frozenset[str] = frozenset()


def _check_rate(value, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ReadinessInputError(f"{label} must be a number between 0 and 100")
    if value < 0 or value > 100:
        raise ReadinessInputError(f"{label} must be between 0 and 100")


def validate_user_id(user_id) -> None:
    if not isinstance(user_id, str) or not user_id.strip():
        raise ReadinessInputError("user_id is required")
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise ReadinessInputError(f"user_id must be at most {MAX_USER_ID_LENGTH} characters")


def validate_cycle_number(cycle_number) -> None:
    if isinstance(cycle_number, bool) or not isinstance(cycle_number, int):
        raise ReadinessInputError("cycle_number must be an integer")
    if cycle_number < 1 or cycle_number > MAX_CYCLE_NUMBER:
        raise ReadinessInputError(f"cycle_number must be between 1 and {MAX_CYCLE_NUMBER}")


def validate_scoring_context(ctx: ScoringContext) -> None:
    validate_user_id(ctx.user_id)
    if not isinstance(ctx.career_path_id, UUID):
        raise ReadinessInputError("career_path_id must be a UUID")
    validate_cycle_number(ctx.cycle_number)
    _check_rate(ctx.overall_milestone_rate, "overall_milestone_rate")
    for pillar_name, rate in (ctx.pillar_milestone_rates or {}).items():
        if rate is not None:
            _check_rate(rate, f"pillar_milestone_rates[{pillar_name!r}]")


def round_score(value: float) -> int:
    # Half-up: 70.5 -> 71, never banker's rounding.
    return int(math.floor(value + 0.5))


def calculate_pillar_score(milestone_rate: float, cycle_number: int, has_accepted_opportunity: bool) -> dict:
    cycle_rate = min(cycle_number / CYCLE_HORIZON, 1) * 100
    opportunity_score = 100 if has_accepted_opportunity else 0

    milestone = milestone_rate * MILESTONE_WEIGHT
    cycle = cycle_rate * CYCLE_WEIGHT
    opportunity = opportunity_score * OPPORTUNITY_WEIGHT

    return {
        "score": round_score(min(max(milestone + cycle + opportunity, 0.0), 100.0)),
        "milestone": round(milestone, 2),
        "cycle": round(cycle, 2),
        "opportunity": round(opportunity, 2),
    }


def calculate_overall_score(pillar_scores: Iterable[tuple[int, float]]) -> int:
    pillar_scores = list(pillar_scores)
    if not pillar_scores:
        return 0
    total = sum(score * weight for score, weight in pillar_scores)
    return round_score(min(max(total, 0.0), 100.0))


def difficulty_tier(overall_score: float) -> int:
    if overall_score >= 67:
        return 3
    if overall_score >= 34:
        return 2
    return 1


def score_trend(current: float, previous: float) -> str:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "stable"


def describe_pillar(name: str, score: float) -> str:
    if score >= 80:
        return f"Excellent {name}: you're well-prepared in this area."
    if score >= 60:
        return f"Strong {name}: keep building on this momentum."
    if score >= 40:
        return f"Growing {name}: continue engaging with activities here."
    if score >= 20:
        return f"Emerging {name}: focus more actions in this area."
    return f"Just starting {name}: look for activities to boost this pillar."


def pillar_payload(name: str, score: int, weight: float, milestone: float, cycle: float, opportunity: float) -> dict:
    return {
        "name": name,
        "score": score,
        "weight": weight,
        "weighted_contribution": round_score(score * weight),
        "breakdown": {
            "milestone": milestone,
            "cycle": cycle,
            "opportunity": opportunity,
        },
        "description": describe_pillar(name, score),
    }


def build_explanation(
    *,
    overall_score: int,
    previous_score: int,
    strongest_pillar: str | None,
    weakest_pillar: str | None,
    weakest_score: int,
    pillars: list[dict],
) -> dict:
    if weakest_pillar:
        reason = f"{weakest_pillar} is currently your lowest readiness score at {weakest_score}%."
    else:
        reason = BALANCED_REASON
    return {
        "overall_score": overall_score,
        "previous_score": previous_score,
        "trend": score_trend(overall_score, previous_score),
        "strongest_pillar": strongest_pillar,
        "weakest_pillar": weakest_pillar,
        "pillars": pillars,
        "next_cycle_recommendation": weakest_pillar or DEFAULT_RECOMMENDATION,
        "next_cycle_reason": reason,
        "difficulty_tier": difficulty_tier(overall_score),
    }


def empty_explanation() -> dict:
    return {
        "overall_score": 0,
        "previous_score": 0,
        "trend": "stable",
        "strongest_pillar": None,
        "weakest_pillar": None,
        "pillars": [],
        "next_cycle_recommendation": DEFAULT_RECOMMENDATION,
        "next_cycle_reason": EMPTY_CATALOG_REASON,
        "difficulty_tier": 1,
    }


class ScoringEngine:
    """Recomputes and persists pillar progress and overall readiness."""

    def __init__(self, db: Session):
        self.db = db

    def score(self, ctx: ScoringContext) -> dict:
        validate_scoring_context(ctx)
        try:
            return self._score(ctx)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Readiness scoring failed for user %s on path %s", ctx.user_id, ctx.career_path_id)
            raise ReadinessUnavailableError("Readiness temporarily unavailable") from exc

    def _score(self, ctx: ScoringContext) -> dict:
        pillars = fetch_pillars(self.db, ctx.career_path_id)
        if not pillars:
            return empty_explanation()

        existing = fetch_pillar_progress(self.db, ctx.user_id, [p.id for p in pillars])
        rates = ctx.pillar_milestone_rates or {}
        accepted = set(ctx.accepted_opportunity_pillars or ())

        results = []
        for pillar, weight in normalize_weights(pillars):
            milestone_rate = rates.get(pillar.name)
            if milestone_rate is None:
                milestone_rate = ctx.overall_milestone_rate
            calc = calculate_pillar_score(milestone_rate, ctx.cycle_number, pillar.name in accepted)
            results.append({"pillar_id": pillar.id, "name": pillar.name, "weight": weight, **calc})

        overall_score = calculate_overall_score((r["score"], r["weight"]) for r in results)

        readiness = fetch_readiness(self.db, ctx.user_id, ctx.career_path_id)
        previous_score = int(readiness.overall_score) if readiness else 0

        # max/min keep the first of equal scores, i.e. catalog order wins ties.
        strongest = max(results, key=lambda r: r["score"])
        weakest = min(results, key=lambda r: r["score"])

        now = datetime.utcnow()
        for result in results:
            row = existing.get(result["pillar_id"])
            if row is None:
                row = PillarProgress(user_id=ctx.user_id, career_pillar_id=result["pillar_id"])
                self.db.add(row)
            row.progress_score = result["score"]
            row.milestone_contribution = result["milestone"]
            row.cycle_contribution = result["cycle"]
            row.opportunity_contribution = result["opportunity"]
            row.last_updated = now

        if readiness is None:
            readiness = UserReadiness(user_id=ctx.user_id, career_path_id=ctx.career_path_id)
            self.db.add(readiness)
        readiness.previous_score = previous_score
        readiness.overall_score = overall_score
        readiness.strongest_pillar = strongest["name"]
        readiness.weakest_pillar = weakest["name"]
        readiness.last_updated = now

        self.db.commit()

        return build_explanation(
            overall_score=overall_score,
            previous_score=previous_score,
            strongest_pillar=strongest["name"],
            weakest_pillar=weakest["name"],
            weakest_score=weakest["score"],
            pillars=[
                pillar_payload(
                    r["name"],
                    r["score"],
                    r["weight"],
                    r["milestone"],
                    r["cycle"],
                    r["opportunity"],
                )
                for r in results
            ],
        )
