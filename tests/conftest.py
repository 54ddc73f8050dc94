"""
conftest.py — Shared Test Fixtures for Clubhouse

Provides an in-memory SQLite database, a FastAPI TestClient bound to it,
and factory fixtures for the core models (users with each admin role,
organization, sport, team, event type, event).

Business Rules:
- All tests run against an isolated in-memory DB (no prod data risk)
- Auth is real: requests carry a bearer token from create_token, so role
  checks in app.dependencies run exactly as in production
- Each test function gets a fresh schema (create_all / drop_all)
- Rate limit counters are reset between tests

Called by: all test files via pytest autodiscovery
Depends on: app.models (Base), app.database (get_db), app.services.auth_service
"""

import os
os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    AdminRole,
    Base,
    Event,
    EventType,
    Organization,
    OrganizationSport,
    Sport,
    Team,
    TeamMember,
    User,
)
from app.services.auth_service import create_token

# ── In-memory SQLite engine ──────────────────────────────────────────

TEST_DB_URL = "sqlite://"  # in-memory, fresh per session

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _sqlite_connect(dbapi_conn, _):
    """Turn on FKs and let SQLAlchemy own BEGIN so SAVEPOINT works."""
    dbapi_conn.isolation_level = None
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


@event.listens_for(engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    from app.rate_limit import limiter

    limiter.reset()
    yield
    limiter.reset()


def _make_user(db: Session, email: str, full_name: str, role_type: str | None = None, **scope) -> User:
    user = User(email=email, full_name=full_name, platform_role="user", is_active=True)
    db.add(user)
    db.flush()
    if role_type:
        db.add(AdminRole(user_id=user.id, role_type=role_type, is_active=True, **scope))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def auth_headers():
    """Build an Authorization header for a user."""

    def _headers(user: User) -> dict:
        token = create_token(user.id, user.email, user.platform_role or "user")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def wrestling(db_session: Session) -> Sport:
    sport = Sport(name="Wrestling", slug="wrestling")
    db_session.add(sport)
    db_session.commit()
    db_session.refresh(sport)
    return sport


@pytest.fixture()
def test_org(db_session: Session, wrestling: Sport) -> Organization:
    """An organization offering wrestling."""
    org = Organization(name="Valley Wrestling Club", slug="valley-wrestling", city="Fresno", state="CA")
    db_session.add(org)
    db_session.flush()
    db_session.add(OrganizationSport(organization_id=org.id, sport_id=wrestling.id))
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture()
def other_org(db_session: Session) -> Organization:
    org = Organization(name="Coastal Grapplers", slug="coastal-grapplers")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture()
def test_team(db_session: Session, test_org: Organization, wrestling: Sport) -> Team:
    team = Team(
        organization_id=test_org.id,
        sport_id=wrestling.id,
        name="Varsity",
        slug="varsity",
        is_active=True,
    )
    db_session.add(team)
    db_session.commit()
    db_session.refresh(team)
    return team


@pytest.fixture()
def platform_admin(db_session: Session) -> User:
    return _make_user(db_session, "root@clubhouse.test", "Pat Platform", "platform_admin")


@pytest.fixture()
def org_admin(db_session: Session, test_org: Organization) -> User:
    return _make_user(
        db_session, "director@clubhouse.test", "Olive Director", "org_admin",
        organization_id=test_org.id,
    )


@pytest.fixture()
def team_admin(db_session: Session, test_team: Team) -> User:
    return _make_user(
        db_session, "coach@clubhouse.test", "Terry Coach", "team_admin", team_id=test_team.id
    )


@pytest.fixture()
def member_user(db_session: Session, test_team: Team) -> User:
    """An active athlete member of test_team with no admin role."""
    user = _make_user(db_session, "athlete@clubhouse.test", "Morgan Member")
    db_session.add(TeamMember(team_id=test_team.id, user_id=user.id, role="athlete", status="active"))
    db_session.commit()
    return user


@pytest.fixture()
def outsider(db_session: Session) -> User:
    """Signed in, but no roles and no memberships."""
    return _make_user(db_session, "visitor@clubhouse.test", "Val Visitor")


@pytest.fixture()
def tournament_type(db_session: Session) -> EventType:
    et = EventType(name="Tournament", category="competitive")
    db_session.add(et)
    db_session.commit()
    db_session.refresh(et)
    return et


@pytest.fixture()
def practice_type(db_session: Session) -> EventType:
    et = EventType(name="Practice", category="training")
    db_session.add(et)
    db_session.commit()
    db_session.refresh(et)
    return et


@pytest.fixture()
def test_event(db_session: Session, test_team: Team, practice_type: EventType) -> Event:
    ev = Event(
        team_id=test_team.id,
        organization_id=test_team.organization_id,
        event_type_id=practice_type.id,
        name="Tuesday Practice",
        event_date=date(2026, 11, 3),
        start_time=time(18, 0),
        end_time=time(20, 0),
        status="scheduled",
    )
    db_session.add(ev)
    db_session.commit()
    db_session.refresh(ev)
    return ev


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    """FastAPI TestClient with get_db overridden to use the test session.

    Authentication is not overridden; pass auth_headers(user) per request.
    """
    from app.database import get_db
    from app.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
