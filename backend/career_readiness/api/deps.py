from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from career_readiness.core.database import SessionLocal
from career_readiness.services.auth import verify_auth_token
from career_readiness.services.readiness import ReadinessOrchestrator


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(x_auth_token: str | None = Header(default=None)) -> str:
    if not x_auth_token:
        raise HTTPException(status_code=401, detail="Missing X-Auth-Token header")
    user_id = verify_auth_token(x_auth_token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired auth token")
    return user_id


def get_orchestrator(db: Session = Depends(get_db)) -> ReadinessOrchestrator:
    return ReadinessOrchestrator(db)
