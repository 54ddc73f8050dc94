"""
routers/teams.py — Team CRUD and membership routes.

Business Rules:
- Create: platform admin or org admin of the target organization
- Read: managers (platform/org/team admin) and active members
- Update: managers; Delete (soft): platform admin or org admin only
- Member add: managers only

Called by: main.py (router mount)
Depends on: services/team_service.py, dependencies
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import can_manage_org, can_manage_team, is_active_team_member, require_user
from ..models import Team, User
from ..schemas.common import missing_fields
from ..schemas.responses import TeamListResponse
from ..schemas.teams import TeamCreate, TeamMemberCreate, TeamUpdate
from ..services.team_service import (
    add_member,
    create_team,
    deactivate_team,
    list_members,
    list_visible_teams,
    update_team,
)
from ..utils.serialization import row_to_dict

log = logging.getLogger(__name__)

router = APIRouter(tags=["teams"])


def _get_team(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(404, "Team not found")
    return team


def _require_view(db: Session, user: User, team: Team) -> None:
    if can_manage_team(db, user, team) or is_active_team_member(db, user, team.id):
        return
    raise HTTPException(403, "You do not have access to this team")


@router.get("/api/teams", response_model=TeamListResponse)
def api_list_teams(
    organization_id: int | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    teams = [row_to_dict(t) for t in list_visible_teams(db, user, organization_id)]
    return {"teams": teams, "count": len(teams)}


@router.post("/api/teams", status_code=201)
def api_create_team(
    body: TeamCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    missing = missing_fields(body, "name", "slug", "organization_id", "sport_id")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    if not can_manage_org(db, user, body.organization_id):
        raise HTTPException(403, "Insufficient permissions to create teams in this organization")
    result = create_team(db, body.model_dump(), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.get("/api/teams/{team_id}")
def api_get_team(team_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    team = _get_team(db, team_id)
    _require_view(db, user, team)
    data = row_to_dict(team)
    data["members"] = list_members(db, team.id)
    return data


@router.put("/api/teams/{team_id}")
def api_update_team(
    team_id: int,
    body: TeamUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    team = _get_team(db, team_id)
    if not can_manage_team(db, user, team):
        raise HTTPException(403, "Insufficient permissions to update this team")
    result = update_team(db, team, body.model_dump(exclude_unset=True), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.delete("/api/teams/{team_id}")
def api_delete_team(team_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    team = _get_team(db, team_id)
    if not can_manage_org(db, user, team.organization_id):
        raise HTTPException(403, "Only organization or platform admins can delete teams")
    return deactivate_team(db, team, user)


@router.get("/api/teams/{team_id}/members")
def api_team_members(
    team_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    team = _get_team(db, team_id)
    _require_view(db, user, team)
    members = list_members(db, team.id)
    return {"members": members, "count": len(members)}


@router.post("/api/teams/{team_id}/members", status_code=201)
def api_add_team_member(
    team_id: int,
    body: TeamMemberCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    team = _get_team(db, team_id)
    if not can_manage_team(db, user, team):
        raise HTTPException(403, "Insufficient permissions. Must be team admin or higher.")
    missing = missing_fields(body, "user_id", "role")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    result = add_member(db, team, body.model_dump(), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result
