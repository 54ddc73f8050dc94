"""
tests/test_routers_athletes.py -- Tests for routers/athletes.py

Covers: athlete creation (new and existing accounts), full_name upkeep,
team-manager permission checks, filters, and delete.

Called by: pytest
Depends on: app/routers/athletes.py, conftest.py
"""

from app.models import AthleteProfile, Team, User


def _payload(team, **extra):
    body = {
        "email": "Sam.Pin@Clubhouse.Test",
        "first_name": "Sam",
        "last_name": "Pin",
        "team_id": team.id,
        "current_weight_class": "132",
    }
    body.update(extra)
    return body


class TestCreateAthlete:
    def test_creates_account_and_profile(self, client, db_session, team_admin, test_team, auth_headers):
        resp = client.post("/api/athletes", json=_payload(test_team), headers=auth_headers(team_admin))
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["email"] == "sam.pin@clubhouse.test"
        assert data["user"]["full_name"] == "Sam Pin"
        assert data["current_weight_class"] == "132"
        account = db_session.query(User).filter_by(email="sam.pin@clubhouse.test").one()
        assert account.password_hash is None

    def test_reuses_existing_account(self, client, db_session, team_admin, member_user, test_team, auth_headers):
        resp = client.post(
            "/api/athletes",
            json=_payload(test_team, email=member_user.email, first_name="Morgan", last_name="Member"),
            headers=auth_headers(team_admin),
        )
        assert resp.status_code == 201
        assert resp.json()["user_id"] == member_user.id
        assert db_session.query(User).filter_by(email=member_user.email).count() == 1

    def test_missing_fields(self, client, team_admin, auth_headers):
        resp = client.post("/api/athletes", json={"email": "a@b.co"}, headers=auth_headers(team_admin))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required fields: first_name, last_name, team_id"

    def test_member_forbidden(self, client, member_user, test_team, auth_headers):
        resp = client.post("/api/athletes", json=_payload(test_team), headers=auth_headers(member_user))
        assert resp.status_code == 403

    def test_invalid_email(self, client, team_admin, test_team, auth_headers):
        resp = client.post(
            "/api/athletes", json=_payload(test_team, email="nope"), headers=auth_headers(team_admin)
        )
        assert resp.status_code == 400


def _athlete(db, user, team, weight="145", active=True):
    a = AthleteProfile(user_id=user.id, team_id=team.id, current_weight_class=weight, is_active=active)
    db.add(a)
    db.commit()
    db.refresh(a)
    return a


class TestAthleteReadUpdate:
    def test_list_filters(self, client, db_session, outsider, member_user, team_admin, test_team, auth_headers):
        _athlete(db_session, member_user, test_team, "145")
        _athlete(db_session, outsider, test_team, "152", active=False)
        headers = auth_headers(team_admin)
        assert client.get("/api/athletes", headers=headers).json()["count"] == 2
        resp = client.get("/api/athletes?weight_class=145", headers=headers)
        assert [a["user_id"] for a in resp.json()["athletes"]] == [member_user.id]
        resp = client.get("/api/athletes?is_active=false", headers=headers)
        assert [a["user_id"] for a in resp.json()["athletes"]] == [outsider.id]

    def test_update_recomputes_full_name(self, client, db_session, team_admin, member_user, test_team, auth_headers):
        athlete = _athlete(db_session, member_user, test_team)
        resp = client.put(
            f"/api/athletes/{athlete.id}",
            json={"first_name": "Mo", "last_name": "Member", "grade_level": "11"},
            headers=auth_headers(team_admin),
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["full_name"] == "Mo Member"
        assert resp.json()["grade_level"] == "11"

    def test_move_to_unmanaged_team_forbidden(self, client, db_session, team_admin, member_user, test_team, wrestling, auth_headers):
        other = Team(organization_id=test_team.organization_id, sport_id=wrestling.id, name="JV", slug="jv")
        db_session.add(other)
        db_session.commit()
        athlete = _athlete(db_session, member_user, test_team)
        resp = client.put(
            f"/api/athletes/{athlete.id}", json={"team_id": other.id}, headers=auth_headers(team_admin)
        )
        assert resp.status_code == 403

    def test_get_missing(self, client, outsider, auth_headers):
        assert client.get("/api/athletes/404", headers=auth_headers(outsider)).status_code == 404

    def test_delete(self, client, db_session, org_admin, member_user, test_team, auth_headers):
        athlete = _athlete(db_session, member_user, test_team)
        resp = client.delete(f"/api/athletes/{athlete.id}", headers=auth_headers(org_admin))
        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(AthleteProfile, athlete.id) is None
        assert db_session.get(User, member_user.id) is not None
