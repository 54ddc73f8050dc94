"""
routers/auth.py — Login, signup, and current-user routes.

Business Rules:
- Login failures never reveal whether the email exists (401 "Invalid email or password")
- Deactivated accounts cannot log in
- Signup validates email format and password strength; duplicate email is 409
- New accounts get platform_role "user"
- Login refreshes last_seen_at
- Both login and signup are rate limited per client IP

Called by: main.py (router mount)
Depends on: services/auth_service.py, dependencies, models
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import active_roles, require_user
from ..models import User
from ..rate_limit import AUTH_LIMIT, limiter
from ..schemas.auth import LoginRequest, SignupRequest
from ..schemas.common import missing_fields
from ..services.auth_service import (
    create_token,
    hash_password,
    is_valid_email,
    validate_password_strength,
    verify_password,
)
from ..utils.serialization import user_summary

log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/api/auth/login")
@limiter.limit(AUTH_LIMIT)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    if missing_fields(body, "email", "password"):
        raise HTTPException(400, "Email and password are required")

    user = db.query(User).filter(User.email == body.email).first()
    if not user or not user.is_active or not verify_password(body.password, user.password_hash):
        log.info(f"Failed login for {body.email}")
        raise HTTPException(401, "Invalid email or password")

    user.last_seen_at = datetime.now(timezone.utc)
    db.commit()

    token = create_token(user.id, user.email, user.platform_role or "user")
    log.info(f"User {user.email} logged in")
    return {"token": token, "user": user_summary(user)}


@router.post("/api/auth/signup", status_code=201)
@limiter.limit(AUTH_LIMIT)
def signup(body: SignupRequest, request: Request, db: Session = Depends(get_db)):
    missing = missing_fields(body, "email", "password", "full_name")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    if not is_valid_email(body.email):
        raise HTTPException(400, "Invalid email format")
    problems = validate_password_strength(body.password)
    if problems:
        raise HTTPException(400, "; ".join(problems))

    if db.query(User.id).filter(User.email == body.email).first():
        raise HTTPException(409, "An account with this email already exists")

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        platform_role="user",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info(f"New account created: {user.email}")

    token = create_token(user.id, user.email, "user")
    return {"token": token, "user": user_summary(user)}


@router.get("/api/auth/me")
def me(user: User = Depends(require_user), db: Session = Depends(get_db)):
    roles = [
        {
            "id": r.id,
            "role_type": r.role_type,
            "organization_id": r.organization_id,
            "team_id": r.team_id,
        }
        for r in active_roles(db, user)
    ]
    return {"user": user_summary(user), "roles": roles}
