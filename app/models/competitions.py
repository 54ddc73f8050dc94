"""Competition models: venues, competitions, weight classes."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base


class Location(Base):
    __tablename__ = "locations"
    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="SET NULL"))
    name = Column(String(255), nullable=False)
    address = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    zip = Column(String(20))
    country = Column(String(50), default="USA")
    venue_type = Column(String(50))  # high_school | middle_school | college | arena | gym | ...
    capacity = Column(Integer)
    facilities = Column(Text)
    phone = Column(String(50))
    website_url = Column(String(1000))
    latitude = Column(Float)
    longitude = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_locations_name_city_state", "name", "city", "state"),
    )


class Competition(Base):
    __tablename__ = "competitions"
    id = Column(Integer, primary_key=True)
    organization_id = Column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    sport_id = Column(Integer, ForeignKey("sports.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    competition_type = Column(String(50), default="tournament")
    default_location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"))
    is_recurring = Column(Boolean, default=False)
    recurrence_rule = Column(String(255))
    start_date = Column(Date)
    end_date = Column(Date)
    registration_url = Column(String(1000))
    contact_first_name = Column(String(100))
    contact_last_name = Column(String(100))
    contact_phone = Column(String(50))
    contact_email = Column(String(255))
    notes = Column(Text)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    sport = relationship("Sport")
    default_location = relationship("Location")

    __table_args__ = (
        Index("ix_competitions_org_name", "organization_id", "name"),
    )


class WeightClass(Base):
    __tablename__ = "weight_classes"
    id = Column(Integer, primary_key=True)
    sport_id = Column(Integer, ForeignKey("sports.id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"))
    name = Column(String(100), nullable=False)
    weight = Column(Float, nullable=False)
    age_group = Column(String(50))
    state = Column(String(50))
    city = Column(String(100))
    expiration_date = Column(Date)
    notes = Column(Text)
    is_active = Column(Boolean, default=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
