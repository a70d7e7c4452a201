from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional

from career_readiness.models.entities import OpportunityType


Rate = Annotated[float, Field(ge=0, le=100)]


class RecomputeIn(BaseModel):
    user_id: str = Field(min_length=1, max_length=120)
    career_path_id: UUID
    cycle_number: int = Field(ge=1, le=100)
    overall_milestone_rate: Rate
    pillar_milestone_rates: Dict[str, Rate] = Field(default_factory=dict)
    accepted_opportunity_pillars: List[str] = Field(default_factory=list)
    engaged_pillars: List[str] = Field(default_factory=list)


class EvaluateUnlocksIn(BaseModel):
    user_id: str = Field(min_length=1, max_length=120)
    career_path_id: UUID
    cycle_number: int = Field(default=1, ge=1, le=100)
    milestone_completion_rate: Rate = 0.0
    engaged_pillars: List[str] = Field(default_factory=list)


class PillarBreakdownOut(BaseModel):
    milestone: float
    cycle: float
    opportunity: float


class PillarExplanationOut(BaseModel):
    name: str
    score: int
    weight: float
    weighted_contribution: int
    breakdown: PillarBreakdownOut
    description: str


class ReadinessExplanationOut(BaseModel):
    overall_score: int
    previous_score: int
    trend: Literal["up", "down", "stable"]
    strongest_pillar: Optional[str] = None
    weakest_pillar: Optional[str] = None
    pillars: List[PillarExplanationOut]
    next_cycle_recommendation: str
    next_cycle_reason: str
    difficulty_tier: Literal[1, 2, 3]


class NewUnlockOut(BaseModel):
    id: UUID
    opportunity_id: UUID
    title: str
    type: OpportunityType
    description: str


class RecomputeOut(ReadinessExplanationOut):
    new_unlocks: List[NewUnlockOut]


class EvaluateUnlocksOut(BaseModel):
    new_unlocks: List[NewUnlockOut]


class PillarOut(BaseModel):
    id: UUID
    name: str
    weight: float
    normalized_weight: float


class OpportunityOut(BaseModel):
    id: UUID
    career_path_id: UUID
    title: str
    description: str
    type: OpportunityType
    difficulty_level: int
    external_url: Optional[str] = None
    next_action_label: str
    next_action_instructions: str


class UserUnlockOut(BaseModel):
    id: UUID
    opportunity_id: UUID
    unlocked_at: datetime
    seen: bool
    accepted: bool
    reason: Optional[str] = None
    opportunity: Optional[OpportunityOut] = None
