import os
import sys
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite://")
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from career_readiness.api.deps import get_db
from career_readiness.core.database import Base
from career_readiness.core.ratelimit import recompute_rate_limiter
from career_readiness.main import app
from career_readiness.models.entities import CareerOpportunity, CareerPath, CareerPillar, UnlockRule
from career_readiness.services.auth import create_access_token

WRITE_PREFIXES = ("INSERT", "UPDATE", "DELETE")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def write_log(engine):
    statements: list[str] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith(WRITE_PREFIXES):
            statements.append(statement)

    return statements


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    recompute_rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    recompute_rate_limiter.reset()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "student-1") -> dict:
        return {"X-Auth-Token": create_access_token(user_id)}

    return _headers


@pytest.fixture
def make_path(db):
    def _make(name="Software Engineer", pillars=(("Academic Readiness", 1.0), ("Skill Development", 1.0))):
        path = CareerPath(name=name)
        db.add(path)
        db.flush()
        for display_order, (pillar_name, weight) in enumerate(pillars):
            db.add(
                CareerPillar(
                    career_path_id=path.id,
                    name=pillar_name,
                    weight=weight,
                    display_order=display_order,
                )
            )
        db.commit()
        return path.id

    return _make


@pytest.fixture
def add_opportunity(db):
    def _add(career_path_id, title, rules=(), *, kind="event", difficulty=1, is_active=True):
        opportunity = CareerOpportunity(
            career_path_id=career_path_id,
            title=title,
            description=f"{title} description",
            type=kind,
            difficulty_level=difficulty,
            is_active=is_active,
        )
        db.add(opportunity)
        db.flush()
        for rule in rules:
            db.add(
                UnlockRule(
                    opportunity_id=opportunity.id,
                    required_cycle_number=rule.get("cycle"),
                    required_pillar=rule.get("pillar"),
                    required_milestone_completion_rate=rule.get("rate", 0),
                )
            )
        db.commit()
        return opportunity.id

    return _add
