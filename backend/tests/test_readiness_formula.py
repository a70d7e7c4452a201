from types import SimpleNamespace

import pytest

from career_readiness.services import scoring
from career_readiness.services.catalog import normalize_weights
from career_readiness.services.unlocks import UnlockContext, rule_passes, rules_pass, unlock_reason


def _rule(cycle=None, pillar=None, rate=0):
    return SimpleNamespace(
        id="rule",
        opportunity_id="opp",
        required_cycle_number=cycle,
        required_pillar=pillar,
        required_milestone_completion_rate=rate,
    )


def _ctx(cycle=1, rate=0.0, pillars=()):
    return UnlockContext(
        user_id="student-1",
        career_path_id=None,
        cycle_number=cycle,
        milestone_completion_rate=rate,
        engaged_pillars=frozenset(pillars),
    )


def test_streak_reward_pillar_breakdown():
    result = scoring.calculate_pillar_score(80, 3, False)

    assert result == {"score": 70, "milestone": 40.0, "cycle": 30.0, "opportunity": 0.0}
    assert scoring.calculate_overall_score([(70, 0.5), (70, 0.5)]) == 70
    assert scoring.difficulty_tier(70) == 3


def test_opportunity_bonus_lifts_one_pillar():
    bonus = scoring.calculate_pillar_score(80, 3, True)
    plain = scoring.calculate_pillar_score(80, 3, False)

    assert bonus["opportunity"] == 20.0
    assert bonus["score"] == 90
    assert plain["score"] == 70
    assert scoring.calculate_overall_score([(90, 0.5), (70, 0.5)]) == 80


def test_cycle_rate_saturates_after_horizon():
    at_horizon = scoring.calculate_pillar_score(0, 3, False)
    past_horizon = scoring.calculate_pillar_score(0, 5, False)
    first_cycle = scoring.calculate_pillar_score(0, 1, False)

    assert at_horizon == past_horizon
    assert at_horizon["cycle"] == 30.0
    assert first_cycle["cycle"] == 10.0


def test_scores_stay_within_bounds():
    for rate in (0, 0.4, 33.3, 50, 99.9, 100):
        for cycle in (1, 2, 3, 7, 100):
            for accepted in (True, False):
                result = scoring.calculate_pillar_score(rate, cycle, accepted)
                total = result["milestone"] + result["cycle"] + result["opportunity"]
                assert 0 <= total <= 100.01
                assert 0 <= result["score"] <= 100

    assert scoring.calculate_pillar_score(100, 100, True)["score"] == 100
    assert scoring.calculate_overall_score([(100, 0.7), (100, 0.3)]) == 100
    assert scoring.calculate_overall_score([]) == 0


def test_round_score_rounds_half_up():
    assert scoring.round_score(70.5) == 71
    assert scoring.round_score(72.5) == 73
    assert scoring.round_score(70.49) == 70


@pytest.mark.parametrize(
    "weights",
    [
        (1.0, 1.0, 1.0, 1.0),
        (3.0, 1.0),
        (0.1, 0.2, 0.3),
        (7.0,),
        (0.0, 0.0, 0.0),
    ],
)
def test_normalized_weights_sum_to_one(weights):
    pillars = [SimpleNamespace(weight=w) for w in weights]
    normalized = [w for _, w in normalize_weights(pillars)]

    assert sum(normalized) == pytest.approx(1.0)


def test_zero_weight_catalog_falls_back_to_equal_weights():
    pillars = [SimpleNamespace(weight=0.0) for _ in range(4)]

    assert [w for _, w in normalize_weights(pillars)] == [0.25] * 4
    assert normalize_weights([]) == []


def test_difficulty_tier_boundaries():
    assert scoring.difficulty_tier(0) == 1
    assert scoring.difficulty_tier(33) == 1
    assert scoring.difficulty_tier(34) == 2
    assert scoring.difficulty_tier(66) == 2
    assert scoring.difficulty_tier(67) == 3
    assert scoring.difficulty_tier(100) == 3


def test_trend_and_pillar_description():
    assert scoring.score_trend(80, 70) == "up"
    assert scoring.score_trend(60, 70) == "down"
    assert scoring.score_trend(70, 70) == "stable"
    assert scoring.describe_pillar("Skill Development", 85).startswith("Excellent Skill Development")
    assert scoring.describe_pillar("Skill Development", 45).startswith("Growing")
    assert scoring.describe_pillar("Skill Development", 5).startswith("Just starting")


def test_empty_explanation_shape():
    explanation = scoring.empty_explanation()

    assert explanation["overall_score"] == 0
    assert explanation["pillars"] == []
    assert explanation["trend"] == "stable"
    assert explanation["next_cycle_recommendation"] == "General Exploration"
    assert explanation["difficulty_tier"] == 1


def test_rule_and_semantics():
    rules = [_rule(cycle=2), _rule(rate=50)]

    assert rules_pass(rules, _ctx(cycle=2, rate=40)) is False
    assert rules_pass(rules, _ctx(cycle=2, rate=50)) is True
    assert rules_pass(rules, _ctx(cycle=1, rate=90)) is False


def test_rule_without_constraints_passes_rate_clause():
    assert rule_passes(_rule(rate=0), _ctx(cycle=1, rate=0)) is True


def test_required_pillar_must_be_engaged():
    rule = _rule(pillar="Exposure & Networking")

    assert rule_passes(rule, _ctx(pillars={"Skill Development"})) is False
    assert rule_passes(rule, _ctx(pillars={"Exposure & Networking"})) is True


def test_empty_rule_set_never_passes():
    assert rules_pass([], _ctx(cycle=100, rate=100, pillars={"Skill Development"})) is False


@pytest.mark.parametrize("bad_rate", [None, "fifty", -5, 150, float("nan")])
def test_malformed_rule_fails_without_raising(bad_rate):
    assert rule_passes(_rule(rate=bad_rate), _ctx(cycle=10, rate=100)) is False


def test_negative_cycle_requirement_is_malformed():
    assert rule_passes(_rule(cycle=-1), _ctx(cycle=10, rate=100)) is False


def test_unlock_reason_lists_every_constraint():
    reason = unlock_reason([_rule(cycle=2, rate=50), _rule(pillar="Proof & Portfolio")])

    assert reason == (
        "You unlocked this by: 50%+ plan completion, reached Cycle 2, engaged with Proof & Portfolio"
    )
    assert unlock_reason([_rule(rate=0)]) == "Unlocked through your progress!"
