import logging
import math
from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from career_readiness.models.entities import UnlockRule, UserUnlock
from career_readiness.services.catalog import fetch_opportunities, fetch_unlock_rules, fetch_user_unlocks
from career_readiness.services.errors import ReadinessInputError, ReadinessUnavailableError
from career_readiness.services.scoring import validate_cycle_number, validate_user_id

logger = logging.getLogger(__name__)


class MalformedRuleError(ValueError):
    pass


@dataclass(frozen=True)
class UnlockContext:
    user_id: str
    career_path_id: UUID
    cycle_number: int
    milestone_completion_rate: float
    engaged_pillars: frozenset[str] = frozenset()


def validate_unlock_context(ctx: UnlockContext) -> None:
    validate_user_id(ctx.user_id)
    if not isinstance(ctx.career_path_id, UUID):
        raise ReadinessInputError("career_path_id must be a UUID")
    validate_cycle_number(ctx.cycle_number)
    rate = ctx.milestone_completion_rate
    if isinstance(rate, bool) or not isinstance(rate, (int, float)) or math.isnan(rate) or rate < 0 or rate > 100:
        raise ReadinessInputError("milestone_completion_rate must be between 0 and 100")


def _rule_thresholds(rule: UnlockRule) -> tuple[int | None, float, str | None]:
    required_cycle = rule.required_cycle_number
    if required_cycle is not None:
        if isinstance(required_cycle, bool) or not isinstance(required_cycle, int) or required_cycle < 0:
            raise MalformedRuleError(f"required_cycle_number={required_cycle!r}")
    required_rate = rule.required_milestone_completion_rate
    if isinstance(required_rate, bool) or not isinstance(required_rate, (int, float)):
        raise MalformedRuleError(f"required_milestone_completion_rate={required_rate!r}")
    if math.isnan(required_rate) or required_rate < 0 or required_rate > 100:
        raise MalformedRuleError(f"required_milestone_completion_rate={required_rate!r}")
    return required_cycle or None, float(required_rate), rule.required_pillar or None


def rule_passes(rule: UnlockRule, ctx: UnlockContext) -> bool:
    try:
        required_cycle, required_rate, required_pillar = _rule_thresholds(rule)
    except MalformedRuleError as exc:
        logger.warning("Skipping malformed unlock rule %s on opportunity %s: %s", rule.id, rule.opportunity_id, exc)
        return False

    if required_cycle is not None and ctx.cycle_number < required_cycle:
        return False
    # Applies even when the rate is the rule's only constraint; a 0 threshold always passes.
    if ctx.milestone_completion_rate < required_rate:
        return False
    if required_pillar is not None and required_pillar not in ctx.engaged_pillars:
        return False
    return True


def rules_pass(rules: Iterable[UnlockRule], ctx: UnlockContext) -> bool:
    rules = list(rules)
    if not rules:
        # An opportunity without rules never unlocks.
        return False
    return all(rule_passes(rule, ctx) for rule in rules)


def unlock_reason(rules: Iterable[UnlockRule]) -> str:
    reasons: list[str] = []
    for rule in rules:
        rate = rule.required_milestone_completion_rate
        if isinstance(rate, (int, float)) and rate > 0:
            reasons.append(f"{rate:g}%+ plan completion")
        if rule.required_cycle_number:
            reasons.append(f"reached Cycle {rule.required_cycle_number}")
        if rule.required_pillar:
            reasons.append(f"engaged with {rule.required_pillar}")
    if not reasons:
        return "Unlocked through your progress!"
    return "You unlocked this by: " + ", ".join(reasons)


class UnlockEvaluator:
    """Appends unlock rows for opportunities whose full rule set now passes.

    Never re-unlocks: opportunities the user already holds are skipped before
    any rule is looked at, and the table is unique on (user, opportunity).
    """

    def __init__(self, db: Session):
        self.db = db

    def evaluate(self, ctx: UnlockContext) -> list[dict]:
        validate_unlock_context(ctx)
        try:
            return self._evaluate(ctx)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Unlock evaluation failed for user %s on path %s", ctx.user_id, ctx.career_path_id)
            raise ReadinessUnavailableError("Unlocks temporarily unavailable") from exc

    def _evaluate(self, ctx: UnlockContext) -> list[dict]:
        opportunities = fetch_opportunities(self.db, ctx.career_path_id)
        if not opportunities:
            return []

        rules_by_opportunity = fetch_unlock_rules(self.db, [o.id for o in opportunities])
        already_unlocked = {u.opportunity_id for u in fetch_user_unlocks(self.db, ctx.user_id)}

        created: list[tuple[UserUnlock, dict]] = []
        for opportunity in opportunities:
            if opportunity.id in already_unlocked:
                continue
            if not rules_pass(rules_by_opportunity.get(opportunity.id, []), ctx):
                continue
            unlock = UserUnlock(user_id=ctx.user_id, opportunity_id=opportunity.id)
            self.db.add(unlock)
            created.append(
                (
                    unlock,
                    {
                        "opportunity_id": opportunity.id,
                        "title": opportunity.title,
                        "type": opportunity.type,
                        "description": opportunity.description,
                    },
                )
            )

        if not created:
            return []

        self.db.flush()
        new_unlocks = [{"id": unlock.id, **detail} for unlock, detail in created]
        self.db.commit()

        for row in new_unlocks:
            logger.info("User %s unlocked opportunity %s (%s)", ctx.user_id, row["opportunity_id"], row["title"])
        return new_unlocks
