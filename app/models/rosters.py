"""Roster models: per-event rosters, members, and the change audit trail."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class Roster(Base):
    __tablename__ = "rosters"
    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255))
    roster_type = Column(String(50), default="varsity")
    max_athletes = Column(Integer)
    max_per_weight_class = Column(Integer)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    event = relationship("Event")
    members = relationship(
        "RosterMember",
        back_populates="roster",
        cascade="all, delete-orphan",
        order_by="RosterMember.weight_class",
    )


class RosterMember(Base):
    __tablename__ = "roster_members"
    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id", ondelete="CASCADE"), nullable=False)
    athlete_profile_id = Column(
        Integer, ForeignKey("athlete_profiles.id", ondelete="CASCADE"), nullable=False
    )
    weight_class = Column(String(50), nullable=False)
    seed = Column(Integer)
    made_weight = Column(Boolean)
    actual_weight = Column(Float)
    status = Column(String(20), default="active")  # active | alternate | scratched
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    roster = relationship("Roster", back_populates="members")
    athlete = relationship("AthleteProfile")


class RosterChangeLog(Base):
    __tablename__ = "roster_change_log"
    id = Column(Integer, primary_key=True)
    roster_id = Column(Integer, ForeignKey("rosters.id", ondelete="CASCADE"), nullable=False)
    athlete_profile_id = Column(Integer, ForeignKey("athlete_profiles.id", ondelete="SET NULL"))
    change_type = Column(String(30), nullable=False)  # added | removed | weight_class_changed | status_changed
    old_value = Column(String(255))
    new_value = Column(String(255))
    reason = Column(Text)
    changed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
