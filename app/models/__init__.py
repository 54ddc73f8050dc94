"""Database models — re-exports all models.

Import from here:  from app.models import User, Team, ...
Or from submodules: from app.models.teams import Team
"""

from .base import Base  # noqa: F401

# Auth & Users
from .auth import AdminRole, User  # noqa: F401

# Tenants & Sports
from .organizations import Organization, OrganizationSport, Sport  # noqa: F401

# Teams, Seasons, Athletes
from .teams import AthleteProfile, Season, Team, TeamMember  # noqa: F401

# Venues, Competitions, Weight Classes
from .competitions import Competition, Location, WeightClass  # noqa: F401

# Events & RSVPs
from .events import Event, EventRsvp, EventType  # noqa: F401

# Rosters
from .rosters import Roster, RosterChangeLog, RosterMember  # noqa: F401

# Activity & Import Jobs
from .activity import ActivityLog, ImportJob  # noqa: F401
