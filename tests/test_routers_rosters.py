"""
tests/test_routers_rosters.py -- Tests for routers/rosters.py and services/roster_service.py

Covers: roster CRUD, default naming, member caps (roster and per weight
class, re-checked on promotion and moves), duplicate athletes, the change
log trail on add/move/status/remove, rosters for events without a team.

Called by: pytest
Depends on: app/routers/rosters.py, app/services/roster_service.py, conftest.py
"""

import pytest

from app.models import AthleteProfile, Event, Roster, RosterChangeLog, RosterMember, User


@pytest.fixture()
def roster(db_session, test_event):
    r = Roster(event_id=test_event.id, name="Varsity Lineup", roster_type="varsity")
    db_session.add(r)
    db_session.commit()
    db_session.refresh(r)
    return r


def _athlete(db, team, email, weight="126"):
    user = User(email=email, full_name=email.split("@")[0].title(), is_active=True)
    db.add(user)
    db.flush()
    a = AthleteProfile(user_id=user.id, team_id=team.id, current_weight_class=weight, is_active=True)
    db.add(a)
    db.commit()
    db.refresh(a)
    return a


# ── Rosters ──────────────────────────────────────────────────────────


class TestRosters:
    def test_create_default_name(self, client, team_admin, test_event, auth_headers):
        resp = client.post("/api/rosters", json={"event_id": test_event.id}, headers=auth_headers(team_admin))
        assert resp.status_code == 201
        assert resp.json()["name"] == "Tuesday Practice Roster"
        assert resp.json()["members"] == []

    def test_create_requires_event(self, client, team_admin, auth_headers):
        assert client.post("/api/rosters", json={}, headers=auth_headers(team_admin)).status_code == 400
        assert client.post("/api/rosters", json={"event_id": 404}, headers=auth_headers(team_admin)).status_code == 404

    def test_member_cannot_create(self, client, member_user, test_event, auth_headers):
        resp = client.post("/api/rosters", json={"event_id": test_event.id}, headers=auth_headers(member_user))
        assert resp.status_code == 403

    def test_list_visibility(self, client, member_user, outsider, roster, auth_headers):
        assert client.get("/api/rosters", headers=auth_headers(member_user)).json()["count"] == 1
        assert client.get("/api/rosters", headers=auth_headers(outsider)).json()["count"] == 0

    def test_view_and_update(self, client, member_user, team_admin, roster, auth_headers):
        assert client.get(f"/api/rosters/{roster.id}", headers=auth_headers(member_user)).status_code == 200
        resp = client.put(f"/api/rosters/{roster.id}", json={"max_athletes": 14}, headers=auth_headers(team_admin))
        assert resp.json()["max_athletes"] == 14
        assert client.put(f"/api/rosters/{roster.id}", json={}, headers=auth_headers(team_admin)).status_code == 400

    def test_teamless_event_roster(self, client, db_session, org_admin, team_admin, test_org, auth_headers):
        ev = Event(organization_id=test_org.id, name="Imported Open")
        db_session.add(ev)
        db_session.commit()
        resp = client.post("/api/rosters", json={"event_id": ev.id}, headers=auth_headers(org_admin))
        assert resp.status_code == 201
        roster_id = resp.json()["id"]
        assert client.get(f"/api/rosters/{roster_id}", headers=auth_headers(org_admin)).status_code == 200
        assert client.get("/api/rosters", headers=auth_headers(org_admin)).json()["count"] == 1

        assert client.get(f"/api/rosters/{roster_id}", headers=auth_headers(team_admin)).status_code == 403
        assert client.post("/api/rosters", json={"event_id": ev.id}, headers=auth_headers(team_admin)).status_code == 403

    def test_delete(self, client, db_session, team_admin, roster, auth_headers):
        roster_id = roster.id
        assert client.delete(f"/api/rosters/{roster_id}", headers=auth_headers(team_admin)).status_code == 200
        db_session.expire_all()
        assert db_session.get(Roster, roster_id) is None


# ── Members ──────────────────────────────────────────────────────────


class TestRosterMembers:
    def test_add_logs_change(self, client, db_session, team_admin, roster, test_team, auth_headers):
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        resp = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": athlete.id, "weight_class": "126", "seed": 2},
            headers=auth_headers(team_admin),
        )
        assert resp.status_code == 201
        assert resp.json()["athlete"]["full_name"] == "Jo"
        entry = db_session.query(RosterChangeLog).one()
        assert entry.change_type == "added"
        assert entry.new_value == "126"
        assert entry.changed_by == team_admin.id

    def test_duplicate_athlete(self, client, db_session, team_admin, roster, test_team, auth_headers):
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        body = {"athlete_profile_id": athlete.id, "weight_class": "126"}
        client.post(f"/api/rosters/{roster.id}/members", json=body, headers=auth_headers(team_admin))
        resp = client.post(f"/api/rosters/{roster.id}/members", json=body, headers=auth_headers(team_admin))
        assert resp.status_code == 409

    def test_roster_cap(self, client, db_session, team_admin, roster, test_team, auth_headers):
        roster.max_athletes = 1
        db_session.commit()
        a1 = _athlete(db_session, test_team, "a1@clubhouse.test")
        a2 = _athlete(db_session, test_team, "a2@clubhouse.test")
        headers = auth_headers(team_admin)
        client.post(f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a1.id, "weight_class": "120"}, headers=headers)
        resp = client.post(
            f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a2.id, "weight_class": "132"}, headers=headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Roster is full (max 1 athletes)"
        # Alternates don't take an active slot
        resp = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": a2.id, "weight_class": "132", "status": "alternate"},
            headers=headers,
        )
        assert resp.status_code == 201

    def test_weight_class_cap(self, client, db_session, team_admin, roster, test_team, auth_headers):
        roster.max_per_weight_class = 1
        db_session.commit()
        a1 = _athlete(db_session, test_team, "a1@clubhouse.test")
        a2 = _athlete(db_session, test_team, "a2@clubhouse.test")
        headers = auth_headers(team_admin)
        client.post(f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a1.id, "weight_class": "138"}, headers=headers)
        resp = client.post(
            f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a2.id, "weight_class": "138"}, headers=headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Weight class 138 is full (max 1)"

    def test_promotion_respects_roster_cap(self, client, db_session, team_admin, roster, test_team, auth_headers):
        roster.max_athletes = 1
        db_session.commit()
        a1 = _athlete(db_session, test_team, "a1@clubhouse.test")
        a2 = _athlete(db_session, test_team, "a2@clubhouse.test")
        headers = auth_headers(team_admin)
        client.post(f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a1.id, "weight_class": "120"}, headers=headers)
        alt_id = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": a2.id, "weight_class": "132", "status": "alternate"},
            headers=headers,
        ).json()["id"]

        resp = client.put(f"/api/rosters/{roster.id}/members/{alt_id}", json={"status": "active"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Roster is full (max 1 athletes)"
        db_session.expire_all()
        assert db_session.query(RosterMember).filter_by(status="active").count() == 1
        assert db_session.query(RosterChangeLog).filter_by(change_type="status_changed").count() == 0

    def test_move_into_full_weight_class(self, client, db_session, team_admin, roster, test_team, auth_headers):
        roster.max_per_weight_class = 1
        db_session.commit()
        a1 = _athlete(db_session, test_team, "a1@clubhouse.test")
        a2 = _athlete(db_session, test_team, "a2@clubhouse.test")
        headers = auth_headers(team_admin)
        client.post(f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a1.id, "weight_class": "138"}, headers=headers)
        member_id = client.post(
            f"/api/rosters/{roster.id}/members", json={"athlete_profile_id": a2.id, "weight_class": "145"}, headers=headers
        ).json()["id"]

        resp = client.put(f"/api/rosters/{roster.id}/members/{member_id}", json={"weight_class": "138"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Weight class 138 is full (max 1)"
        # Staying put at a full class is fine
        resp = client.put(f"/api/rosters/{roster.id}/members/{member_id}", json={"weight_class": "145", "seed": 1}, headers=headers)
        assert resp.status_code == 200

    def test_update_at_full_roster_keeps_own_slot(self, client, db_session, team_admin, roster, test_team, auth_headers):
        roster.max_athletes = 1
        roster.max_per_weight_class = 1
        db_session.commit()
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        headers = auth_headers(team_admin)
        member_id = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": athlete.id, "weight_class": "126"},
            headers=headers,
        ).json()["id"]
        resp = client.put(
            f"/api/rosters/{roster.id}/members/{member_id}",
            json={"weight_class": "132", "status": "active"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["weight_class"] == "132"

    def test_unknown_athlete(self, client, team_admin, roster, auth_headers):
        resp = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": 999, "weight_class": "126"},
            headers=auth_headers(team_admin),
        )
        assert resp.status_code == 404

    def test_move_and_status_logged(self, client, db_session, team_admin, roster, test_team, auth_headers):
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        headers = auth_headers(team_admin)
        member_id = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": athlete.id, "weight_class": "126"},
            headers=headers,
        ).json()["id"]
        resp = client.put(
            f"/api/rosters/{roster.id}/members/{member_id}",
            json={"weight_class": "132", "status": "scratched"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["weight_class"] == "132"

        changes = client.get(f"/api/rosters/{roster.id}/changes", headers=headers).json()["changes"]
        by_type = {c["change_type"]: c for c in changes}
        assert by_type["weight_class_changed"]["reason"] == "Changed from 126 to 132"
        assert by_type["status_changed"]["old_value"] == "active"
        assert by_type["status_changed"]["new_value"] == "scratched"

    def test_remove_with_reason(self, client, db_session, team_admin, roster, test_team, auth_headers):
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        headers = auth_headers(team_admin)
        member_id = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": athlete.id, "weight_class": "126"},
            headers=headers,
        ).json()["id"]
        resp = client.delete(f"/api/rosters/{roster.id}/members/{member_id}?reason=Injury", headers=headers)
        assert resp.json() == {"status": "deleted", "id": member_id}
        removed = db_session.query(RosterChangeLog).filter_by(change_type="removed").one()
        assert removed.reason == "Injury"
        assert removed.old_value == "126"

    def test_member_on_other_roster_404(self, client, db_session, team_admin, roster, test_event, test_team, auth_headers):
        other = Roster(event_id=test_event.id, name="JV")
        db_session.add(other)
        db_session.commit()
        athlete = _athlete(db_session, test_team, "jo@clubhouse.test")
        headers = auth_headers(team_admin)
        member_id = client.post(
            f"/api/rosters/{roster.id}/members",
            json={"athlete_profile_id": athlete.id, "weight_class": "126"},
            headers=headers,
        ).json()["id"]
        resp = client.put(f"/api/rosters/{other.id}/members/{member_id}", json={"seed": 1}, headers=headers)
        assert resp.status_code == 404

    def test_members_listed_by_weight(self, client, db_session, team_admin, member_user, roster, test_team, auth_headers):
        headers = auth_headers(team_admin)
        for email, wc in (("h@clubhouse.test", "285"), ("l@clubhouse.test", "106")):
            a = _athlete(db_session, test_team, email)
            client.post(
                f"/api/rosters/{roster.id}/members",
                json={"athlete_profile_id": a.id, "weight_class": wc},
                headers=headers,
            )
        db_session.expire_all()
        resp = client.get(f"/api/rosters/{roster.id}/members", headers=auth_headers(member_user))
        assert [m["weight_class"] for m in resp.json()["members"]] == ["106", "285"]
