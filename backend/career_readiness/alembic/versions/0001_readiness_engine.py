"""Readiness scoring and opportunity unlock schema

Revision ID: 0001_readiness_engine
Revises:
Create Date: 2026-10-16 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_readiness_engine"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "career_paths",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "career_pillars",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("career_path_id", sa.Uuid(), sa.ForeignKey("career_paths.id"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("weight > 0", name="ck_career_pillars_weight_positive"),
    )

    op.create_table(
        "user_pillar_progress",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("career_pillar_id", sa.Uuid(), sa.ForeignKey("career_pillars.id"), nullable=False),
        sa.Column("progress_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("milestone_contribution", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("cycle_contribution", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("opportunity_contribution", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "career_pillar_id", name="uq_user_pillar_progress_user_pillar"),
    )

    op.create_table(
        "user_readiness",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("career_path_id", sa.Uuid(), sa.ForeignKey("career_paths.id"), nullable=False),
        sa.Column("overall_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("previous_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("strongest_pillar", sa.String(length=120), nullable=True),
        sa.Column("weakest_pillar", sa.String(length=120), nullable=True),
        sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "career_path_id", name="uq_user_readiness_user_path"),
    )

    op.create_table(
        "career_opportunities",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("career_path_id", sa.Uuid(), sa.ForeignKey("career_paths.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("difficulty_level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("external_url", sa.Text(), nullable=True),
        sa.Column("next_action_label", sa.String(length=120), nullable=False, server_default=sa.text("''")),
        sa.Column("next_action_instructions", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "career_unlock_rules",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("opportunity_id", sa.Uuid(), sa.ForeignKey("career_opportunities.id"), nullable=False),
        sa.Column("required_cycle_number", sa.Integer(), nullable=True),
        sa.Column("required_pillar", sa.String(length=120), nullable=True),
        sa.Column("required_milestone_completion_rate", sa.Float(), nullable=True, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "user_career_unlocks",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("opportunity_id", sa.Uuid(), sa.ForeignKey("career_opportunities.id"), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("seen", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("accepted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.UniqueConstraint("user_id", "opportunity_id", name="uq_user_career_unlocks_user_opportunity"),
    )

    op.create_index("ix_career_pillars_career_path_id", "career_pillars", ["career_path_id"])
    op.create_index("ix_user_pillar_progress_user_id", "user_pillar_progress", ["user_id"])
    op.create_index("ix_user_readiness_user_id", "user_readiness", ["user_id"])
    op.create_index("ix_career_opportunities_career_path_id", "career_opportunities", ["career_path_id"])
    op.create_index("ix_career_unlock_rules_opportunity_id", "career_unlock_rules", ["opportunity_id"])
    op.create_index("ix_user_career_unlocks_user_id", "user_career_unlocks", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_career_unlocks_user_id", table_name="user_career_unlocks")
    op.drop_index("ix_career_unlock_rules_opportunity_id", table_name="career_unlock_rules")
    op.drop_index("ix_career_opportunities_career_path_id", table_name="career_opportunities")
    op.drop_index("ix_user_readiness_user_id", table_name="user_readiness")
    op.drop_index("ix_user_pillar_progress_user_id", table_name="user_pillar_progress")
    op.drop_index("ix_career_pillars_career_path_id", table_name="career_pillars")

    op.drop_table("user_career_unlocks")
    op.drop_table("career_unlock_rules")
    op.drop_table("career_opportunities")
    op.drop_table("user_readiness")
    op.drop_table("user_pillar_progress")
    op.drop_table("career_pillars")
    op.drop_table("career_paths")
