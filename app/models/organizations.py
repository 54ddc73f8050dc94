"""Organization models: tenants, sports, and the org-sport link table."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..utils.encrypted_type import EncryptedText
from .base import Base


class Organization(Base):
    __tablename__ = "organizations"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    address = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    zip = Column(String(20))
    phone_number = Column(String(50))
    email = Column(String(255))
    website_url = Column(String(1000))
    logo_url = Column(String(1000))

    # Per-tenant credentials, encrypted at rest
    openai_api_key = Column(EncryptedText)
    openai_api_key_updated_at = Column(DateTime)
    ghl_client_id = Column(EncryptedText)
    ghl_client_id_updated_at = Column(DateTime)
    ghl_client_secret = Column(EncryptedText)
    ghl_client_secret_updated_at = Column(DateTime)
    ghl_api_key = Column(EncryptedText)
    ghl_api_key_updated_at = Column(DateTime)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    sport_links = relationship(
        "OrganizationSport", back_populates="organization", cascade="all, delete-orphan"
    )
    teams = relationship("Team", back_populates="organization")


class Sport(Base):
    __tablename__ = "sports"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100))
    icon_url = Column(String(1000))


class OrganizationSport(Base):
    __tablename__ = "organization_sports"
    id = Column(Integer, primary_key=True)
    organization_id = Column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    sport_id = Column(Integer, ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)

    organization = relationship("Organization", back_populates="sport_links")
    sport = relationship("Sport")

    __table_args__ = (
        UniqueConstraint("organization_id", "sport_id", name="uq_org_sport"),
    )
