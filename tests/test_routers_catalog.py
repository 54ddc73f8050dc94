"""
tests/test_routers_catalog.py -- Tests for competitions, locations, weight classes,
and the read-only reference lists (sports, event types).

Covers: create permission rules, filters and ordering, update/delete
scoping, the weight class copy endpoint.

Called by: pytest
Depends on: app/routers/competitions.py, app/routers/locations.py,
            app/routers/weight_classes.py, app/routers/reference.py, conftest.py
"""

from app.models import Competition, Location, Sport, WeightClass


# ── Competitions ─────────────────────────────────────────────────────


class TestCompetitions:
    def test_org_admin_creates(self, client, db_session, org_admin, test_org, wrestling, auth_headers):
        loc = Location(name="Central High Gym", city="Fresno", state="CA")
        db_session.add(loc)
        db_session.commit()
        resp = client.post(
            "/api/competitions",
            json={
                "organization_id": test_org.id,
                "sport_id": wrestling.id,
                "name": "Winter Classic",
                "start_date": "2026-12-12",
                "default_location_id": loc.id,
            },
            headers=auth_headers(org_admin),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["competition_type"] == "tournament"
        assert data["sport"]["name"] == "Wrestling"
        assert data["default_location"]["name"] == "Central High Gym"

    def test_team_admin_forbidden(self, client, team_admin, test_org, wrestling, auth_headers):
        resp = client.post(
            "/api/competitions",
            json={"organization_id": test_org.id, "sport_id": wrestling.id, "name": "X"},
            headers=auth_headers(team_admin),
        )
        assert resp.status_code == 403

    def test_missing_fields(self, client, org_admin, auth_headers):
        resp = client.post("/api/competitions", json={"name": "X"}, headers=auth_headers(org_admin))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required fields: organization_id, sport_id"

    def test_list_sorted_and_filtered(self, client, db_session, outsider, test_org, other_org, wrestling, auth_headers):
        for org, name in ((test_org, "Zeta Open"), (test_org, "Alpha Duals"), (other_org, "Coast Cup")):
            db_session.add(Competition(organization_id=org.id, sport_id=wrestling.id, name=name))
        db_session.commit()
        resp = client.get(f"/api/competitions?organization_id={test_org.id}", headers=auth_headers(outsider))
        assert [c["name"] for c in resp.json()["competitions"]] == ["Alpha Duals", "Zeta Open"]

    def test_update_and_delete_scoped(self, client, db_session, org_admin, other_org, test_org, wrestling, auth_headers):
        mine = Competition(organization_id=test_org.id, sport_id=wrestling.id, name="Mine")
        theirs = Competition(organization_id=other_org.id, sport_id=wrestling.id, name="Theirs")
        db_session.add_all([mine, theirs])
        db_session.commit()
        headers = auth_headers(org_admin)

        resp = client.put(f"/api/competitions/{mine.id}", json={"notes": "Bring singlets"}, headers=headers)
        assert resp.json()["notes"] == "Bring singlets"
        assert client.put(f"/api/competitions/{theirs.id}", json={"notes": "x"}, headers=headers).status_code == 403
        assert client.put(f"/api/competitions/{mine.id}", json={}, headers=headers).status_code == 400
        assert client.delete(f"/api/competitions/{theirs.id}", headers=headers).status_code == 403
        assert client.delete(f"/api/competitions/{mine.id}", headers=headers).status_code == 200

    def test_get_missing(self, client, outsider, auth_headers):
        assert client.get("/api/competitions/321", headers=auth_headers(outsider)).status_code == 404


# ── Locations ────────────────────────────────────────────────────────


class TestLocations:
    def test_any_user_creates_with_default_country(self, client, outsider, auth_headers):
        resp = client.post(
            "/api/locations", json={"name": "Rec Center", "city": "Visalia"}, headers=auth_headers(outsider)
        )
        assert resp.status_code == 201
        assert resp.json()["country"] == "USA"

    def test_name_required(self, client, outsider, auth_headers):
        resp = client.post("/api/locations", json={"city": "Visalia"}, headers=auth_headers(outsider))
        assert resp.status_code == 400

    def test_list_by_org(self, client, db_session, outsider, test_org, auth_headers):
        db_session.add_all([
            Location(name="B Gym", organization_id=test_org.id),
            Location(name="A Arena", organization_id=test_org.id),
            Location(name="Elsewhere"),
        ])
        db_session.commit()
        resp = client.get(f"/api/locations?organization_id={test_org.id}", headers=auth_headers(outsider))
        assert [loc["name"] for loc in resp.json()["locations"]] == ["A Arena", "B Gym"]

    def test_update_requires_platform_admin(self, client, db_session, org_admin, platform_admin, auth_headers):
        loc = Location(name="Old Name")
        db_session.add(loc)
        db_session.commit()
        assert client.put(
            f"/api/locations/{loc.id}", json={"name": "New"}, headers=auth_headers(org_admin)
        ).status_code == 403
        resp = client.put(f"/api/locations/{loc.id}", json={"name": "New"}, headers=auth_headers(platform_admin))
        assert resp.json()["name"] == "New"
        assert client.delete(f"/api/locations/{loc.id}", headers=auth_headers(platform_admin)).status_code == 200

    def test_get_missing(self, client, outsider, auth_headers):
        assert client.get("/api/locations/999", headers=auth_headers(outsider)).status_code == 404


# ── Weight classes ───────────────────────────────────────────────────


def _wc(db, sport, name, weight, org=None, active=True):
    wc = WeightClass(sport_id=sport.id, organization_id=org.id if org else None,
                     name=name, weight=weight, is_active=active)
    db.add(wc)
    db.commit()
    db.refresh(wc)
    return wc


class TestWeightClasses:
    def test_list_ordered_by_weight(self, client, db_session, outsider, wrestling, auth_headers):
        _wc(db_session, wrestling, "138", 138)
        _wc(db_session, wrestling, "106", 106)
        _wc(db_session, wrestling, "285", 285, active=False)
        resp = client.get(f"/api/weight-classes?sport_id={wrestling.id}&is_active=true", headers=auth_headers(outsider))
        assert [w["name"] for w in resp.json()["weight_classes"]] == ["106", "138"]

    def test_create_platform_admin_only(self, client, org_admin, platform_admin, wrestling, auth_headers):
        body = {"sport_id": wrestling.id, "name": "113", "weight": 113}
        assert client.post("/api/weight-classes", json=body, headers=auth_headers(org_admin)).status_code == 403
        resp = client.post("/api/weight-classes", json=body, headers=auth_headers(platform_admin))
        assert resp.status_code == 201
        assert resp.json()["created_by"] is not None

    def test_create_missing_weight(self, client, platform_admin, wrestling, auth_headers):
        resp = client.post(
            "/api/weight-classes", json={"sport_id": wrestling.id, "name": "113"},
            headers=auth_headers(platform_admin),
        )
        assert resp.status_code == 400

    def test_org_admin_manages_org_class(self, client, db_session, org_admin, test_org, other_org, wrestling, auth_headers):
        mine = _wc(db_session, wrestling, "120", 120, org=test_org)
        theirs = _wc(db_session, wrestling, "126", 126, org=other_org)
        headers = auth_headers(org_admin)
        assert client.get(f"/api/weight-classes/{mine.id}", headers=headers).status_code == 200
        assert client.get(f"/api/weight-classes/{theirs.id}", headers=headers).status_code == 403
        resp = client.put(f"/api/weight-classes/{mine.id}", json={"age_group": "U15"}, headers=headers)
        assert resp.json()["age_group"] == "U15"
        assert client.put(
            f"/api/weight-classes/{mine.id}", json={"organization_id": other_org.id}, headers=headers
        ).status_code == 403
        assert client.delete(f"/api/weight-classes/{mine.id}", headers=headers).status_code == 200

    def test_copy_defaults(self, client, team_admin, db_session, wrestling, auth_headers):
        src = _wc(db_session, wrestling, "132", 132, active=False)
        resp = client.post(f"/api/weight-classes/{src.id}/copy", headers=auth_headers(team_admin))
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "132 (Copy)"
        assert data["is_active"] is True
        assert data["weight"] == 132
        assert data["created_by"] == team_admin.id

    def test_copy_with_overrides(self, client, platform_admin, db_session, wrestling, auth_headers):
        src = _wc(db_session, wrestling, "132", 132)
        resp = client.post(
            f"/api/weight-classes/{src.id}/copy",
            json={"name": "132 Girls", "state": "CA"},
            headers=auth_headers(platform_admin),
        )
        assert resp.json()["name"] == "132 Girls"
        assert resp.json()["state"] == "CA"

    def test_copy_requires_admin(self, client, member_user, db_session, wrestling, auth_headers):
        src = _wc(db_session, wrestling, "132", 132)
        resp = client.post(f"/api/weight-classes/{src.id}/copy", headers=auth_headers(member_user))
        assert resp.status_code == 403


# ── Reference data ───────────────────────────────────────────────────


def test_sports_and_event_types(client, db_session, outsider, wrestling, tournament_type, practice_type, auth_headers):
    db_session.add(Sport(name="Basketball", slug="basketball"))
    db_session.commit()
    headers = auth_headers(outsider)
    sports = client.get("/api/sports", headers=headers).json()["sports"]
    assert [s["name"] for s in sports] == ["Basketball", "Wrestling"]
    types = client.get("/api/event-types", headers=headers).json()["event_types"]
    assert [t["name"] for t in types] == ["Practice", "Tournament"]


def test_reference_requires_auth(client):
    assert client.get("/api/sports").status_code == 401
