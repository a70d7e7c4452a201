from enum import Enum
from uuid import uuid4
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    Integer,
    DateTime,
    ForeignKey,
    Float,
    UniqueConstraint,
    CheckConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from career_readiness.core.database import Base


class OpportunityType(str, Enum):
    internship = "internship"
    scholarship = "scholarship"
    program = "program"
    certification = "certification"
    event = "event"
    competition = "competition"


class CareerPath(Base):
    __tablename__ = "career_paths"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(160), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CareerPillar(Base):
    __tablename__ = "career_pillars"
    __table_args__ = (
        CheckConstraint("weight > 0", name="ck_career_pillars_weight_positive"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    career_path_id = Column(Uuid(as_uuid=True), ForeignKey("career_paths.id"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    weight = Column(Float, default=1.0, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    career_path = relationship("CareerPath")


class PillarProgress(Base):
    __tablename__ = "user_pillar_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "career_pillar_id", name="uq_user_pillar_progress_user_pillar"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(120), nullable=False, index=True)
    career_pillar_id = Column(Uuid(as_uuid=True), ForeignKey("career_pillars.id"), nullable=False)
    progress_score = Column(Integer, default=0, nullable=False)
    milestone_contribution = Column(Float, default=0.0, nullable=False)
    cycle_contribution = Column(Float, default=0.0, nullable=False)
    opportunity_contribution = Column(Float, default=0.0, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)

    pillar = relationship("CareerPillar")


class UserReadiness(Base):
    __tablename__ = "user_readiness"
    __table_args__ = (
        UniqueConstraint("user_id", "career_path_id", name="uq_user_readiness_user_path"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(120), nullable=False, index=True)
    career_path_id = Column(Uuid(as_uuid=True), ForeignKey("career_paths.id"), nullable=False)
    overall_score = Column(Integer, default=0, nullable=False)
    previous_score = Column(Integer, default=0, nullable=False)
    strongest_pillar = Column(String(120), nullable=True)
    weakest_pillar = Column(String(120), nullable=True)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)


class CareerOpportunity(Base):
    __tablename__ = "career_opportunities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    career_path_id = Column(Uuid(as_uuid=True), ForeignKey("career_paths.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(32), nullable=False)
    difficulty_level = Column(Integer, default=1, nullable=False)
    external_url = Column(Text, nullable=True)
    next_action_label = Column(String(120), nullable=False, default="")
    next_action_instructions = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    career_path = relationship("CareerPath")


class UnlockRule(Base):
    __tablename__ = "career_unlock_rules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    opportunity_id = Column(Uuid(as_uuid=True), ForeignKey("career_opportunities.id"), nullable=False, index=True)
    required_cycle_number = Column(Integer, nullable=True)
    required_pillar = Column(String(120), nullable=True)
    required_milestone_completion_rate = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    opportunity = relationship("CareerOpportunity")


class UserUnlock(Base):
    __tablename__ = "user_career_unlocks"
    __table_args__ = (
        UniqueConstraint("user_id", "opportunity_id", name="uq_user_career_unlocks_user_opportunity"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(120), nullable=False, index=True)
    opportunity_id = Column(Uuid(as_uuid=True), ForeignKey("career_opportunities.id"), nullable=False)
    unlocked_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    seen = Column(Boolean, default=False, nullable=False)
    accepted = Column(Boolean, default=False, nullable=False)

    opportunity = relationship("CareerOpportunity")
