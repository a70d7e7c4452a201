import logging
from typing import Iterable, Mapping
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from career_readiness.services.catalog import (
    fetch_pillar_progress,
    fetch_pillars,
    fetch_readiness,
    normalize_weights,
)
from career_readiness.services.errors import ReadinessInputError, ReadinessUnavailableError, ensure_caller_owns
from career_readiness.services.scoring import (
    ScoringContext,
    ScoringEngine,
    build_explanation,
    empty_explanation,
    pillar_payload,
    validate_scoring_context,
)
from career_readiness.services.unlocks import UnlockContext, UnlockEvaluator, validate_unlock_context

logger = logging.getLogger(__name__)


class ReadinessOrchestrator:
    """Entry point for the rest of the product.

    ``recompute`` scores first and commits, then evaluates unlocks, so unlock
    rules always see the pillar state the same request just wrote.
    ``explain`` only reads.
    """

    def __init__(
        self,
        db: Session,
        *,
        scoring_engine: ScoringEngine | None = None,
        unlock_evaluator: UnlockEvaluator | None = None,
    ):
        self.db = db
        self.scoring_engine = scoring_engine or ScoringEngine(db)
        self.unlock_evaluator = unlock_evaluator or UnlockEvaluator(db)

    def recompute(
        self,
        *,
        caller_user_id: str,
        user_id: str,
        career_path_id: UUID,
        cycle_number: int,
        overall_milestone_rate: float,
        pillar_milestone_rates: Mapping[str, float] | None = None,
        accepted_opportunity_pillars: Iterable[str] = (),
        engaged_pillars: Iterable[str] = (),
    ) -> dict:
        ensure_caller_owns(caller_user_id, user_id)
        scoring_ctx = ScoringContext(
            user_id=user_id,
            career_path_id=career_path_id,
            cycle_number=cycle_number,
            overall_milestone_rate=overall_milestone_rate,
            pillar_milestone_rates=dict(pillar_milestone_rates or {}),
            accepted_opportunity_pillars=frozenset(accepted_opportunity_pillars or ()),
        )
        unlock_ctx = UnlockContext(
            user_id=user_id,
            career_path_id=career_path_id,
            cycle_number=cycle_number,
            milestone_completion_rate=overall_milestone_rate,
            engaged_pillars=frozenset(engaged_pillars or ()),
        )
        validate_scoring_context(scoring_ctx)
        validate_unlock_context(unlock_ctx)

        explanation = self.scoring_engine.score(scoring_ctx)
        if not explanation["pillars"]:
            return {**explanation, "new_unlocks": []}

        new_unlocks = self.unlock_evaluator.evaluate(unlock_ctx)
        logger.info(
            "Recomputed readiness for user %s on path %s: %s (%s), %d new unlock(s)",
            user_id,
            career_path_id,
            explanation["overall_score"],
            explanation["trend"],
            len(new_unlocks),
        )
        return {**explanation, "new_unlocks": new_unlocks}

    def evaluate_unlocks(
        self,
        *,
        caller_user_id: str,
        user_id: str,
        career_path_id: UUID,
        cycle_number: int = 1,
        milestone_completion_rate: float = 0.0,
        engaged_pillars: Iterable[str] = (),
    ) -> list[dict]:
        ensure_caller_owns(caller_user_id, user_id)
        return self.unlock_evaluator.evaluate(
            UnlockContext(
                user_id=user_id,
                career_path_id=career_path_id,
                cycle_number=cycle_number,
                milestone_completion_rate=milestone_completion_rate,
                engaged_pillars=frozenset(engaged_pillars or ()),
            )
        )

    def explain(self, *, caller_user_id: str, user_id: str, career_path_id: UUID) -> dict:
        ensure_caller_owns(caller_user_id, user_id)
        if not isinstance(career_path_id, UUID):
            raise ReadinessInputError("career_path_id must be a UUID")
        try:
            return self._explain(user_id, career_path_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Reading readiness failed for user %s on path %s", user_id, career_path_id)
            raise ReadinessUnavailableError("Readiness temporarily unavailable") from exc

    def _explain(self, user_id: str, career_path_id: UUID) -> dict:
        pillars = fetch_pillars(self.db, career_path_id)
        if not pillars:
            return empty_explanation()

        progress = fetch_pillar_progress(self.db, user_id, [p.id for p in pillars])
        readiness = fetch_readiness(self.db, user_id, career_path_id)

        pillar_rows = []
        for pillar, weight in normalize_weights(pillars):
            row = progress.get(pillar.id)
            pillar_rows.append(
                pillar_payload(
                    pillar.name,
                    int(row.progress_score) if row else 0,
                    weight,
                    float(row.milestone_contribution) if row else 0.0,
                    float(row.cycle_contribution) if row else 0.0,
                    float(row.opportunity_contribution) if row else 0.0,
                )
            )

        lowest = min(pillar_rows, key=lambda p: p["score"])
        weakest_pillar = readiness.weakest_pillar if readiness else None
        weakest_score = next(
            (p["score"] for p in pillar_rows if p["name"] == weakest_pillar),
            lowest["score"],
        )
        explanation = build_explanation(
            overall_score=int(readiness.overall_score) if readiness else 0,
            previous_score=int(readiness.previous_score) if readiness else 0,
            strongest_pillar=readiness.strongest_pillar if readiness else None,
            weakest_pillar=weakest_pillar,
            weakest_score=weakest_score,
            pillars=pillar_rows,
        )
        if not weakest_pillar:
            explanation["next_cycle_recommendation"] = lowest["name"]
        return explanation
