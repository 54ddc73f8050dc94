"""Event models: event types, scheduled events, RSVPs."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base


class EventType(Base):
    __tablename__ = "event_types"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    category = Column(String(50))  # competitive | training | meeting | social


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"))
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"))
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="SET NULL"))
    competition_id = Column(Integer, ForeignKey("competitions.id", ondelete="SET NULL"))
    event_type_id = Column(Integer, ForeignKey("event_types.id"))
    name = Column(String(255), nullable=False)
    description = Column(Text)
    event_date = Column(Date)
    start_time = Column(Time)
    end_time = Column(Time)
    arrival_time = Column(Time)
    weigh_in_time = Column(Time)
    check_in_time = Column(Time)
    registration_deadline = Column(DateTime)
    all_day = Column(Boolean, default=False)
    is_mandatory = Column(Boolean, default=False)
    max_attendees = Column(Integer)
    rsvp_deadline = Column(DateTime)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"))
    opponent_team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"))
    status = Column(String(20), default="scheduled")  # scheduled | completed | cancelled
    is_public = Column(Boolean, default=False)
    show_results_public = Column(Boolean, default=False)
    notes = Column(Text)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    team = relationship("Team", foreign_keys=[team_id])
    event_type = relationship("EventType")
    location = relationship("Location")
    rsvps = relationship("EventRsvp", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_events_team_date", "team_id", "event_date"),
        Index("ix_events_competition_team", "competition_id", "team_id"),
    )


class EventRsvp(Base):
    __tablename__ = "event_rsvps"
    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    response = Column(String(10), nullable=False)  # yes | no | maybe
    guests_count = Column(Integer, default=0)
    notes = Column(Text)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    event = relationship("Event", back_populates="rsvps")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_rsvp_event_user"),
    )
