"""initial schema - organizations, teams, events, rosters, imports

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

For databases created by the app's startup sync: run `alembic stamp 001_initial`.
For NEW databases: run `alembic upgrade head` (creates all tables from models).
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables from SQLAlchemy models (checkfirst, idempotent)."""
    from app.models import Base

    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    """Drop all tables. DESTRUCTIVE — only for dev/test environments."""
    from app.models import Base

    Base.metadata.drop_all(bind=op.get_bind())
