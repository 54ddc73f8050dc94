"""Auth & user models: profiles and scoped admin roles."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255))
    full_name = Column(String(255))
    first_name = Column(String(100))
    last_name = Column(String(100))
    avatar_url = Column(String(1000))
    phone = Column(String(50))
    date_of_birth = Column(Date)
    address = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    zip = Column(String(20))
    timezone = Column(String(64), default="America/New_York")
    platform_role = Column(String(20), default="user")  # user | admin | platform_admin | super_admin
    is_active = Column(Boolean, default=True)
    last_seen_at = Column(DateTime)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    admin_roles = relationship(
        "AdminRole", back_populates="user", cascade="all, delete-orphan"
    )
    memberships = relationship("TeamMember", back_populates="user")


class AdminRole(Base):
    """A scoped administrative grant.

    platform_admin / super_admin rows carry no scope; org_admin rows carry
    organization_id; team_admin rows carry team_id.
    """

    __tablename__ = "admin_roles"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_type = Column(String(20), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"))
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="admin_roles")
    organization = relationship("Organization")
    team = relationship("Team")

    __table_args__ = (
        Index("ix_admin_roles_user_active", "user_id", "is_active"),
    )
