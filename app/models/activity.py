"""Activity log and import job tracking."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class ActivityLog(Base):
    __tablename__ = "activity_log"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="SET NULL"))
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"))
    action = Column(String(100), nullable=False)  # organization.created, team.member_added, ...
    entity_type = Column(String(50))
    entity_id = Column(Integer)
    old_values = Column(JSON)
    new_values = Column(JSON)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = relationship("User")

    __table_args__ = (
        Index("ix_activity_org_created", "organization_id", "created_at"),
    )


class ImportJob(Base):
    """A file handed to the external processing webhook, awaiting its callback."""

    __tablename__ = "import_jobs"
    id = Column(Integer, primary_key=True)
    organization_id = Column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    entity_type = Column(String(50), nullable=False)
    file_name = Column(String(500))
    file_path = Column(String(1000))
    file_size = Column(Integer)
    status = Column(String(20), default="processing")  # processing | completed | failed
    result = Column(JSON)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime)
