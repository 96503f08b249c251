"""Auth, user, profile, and session models."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base

ROLES = ("customer", "vendor", "admin")
VERIFICATION_STATUSES = ("pending", "verified", "rejected")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255))  # NULL for federated-identity accounts
    role = Column(String(20), nullable=False)  # customer | vendor | admin
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    customer_profile = relationship(
        "CustomerProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    vendor_profile = relationship(
        "VendorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    admin_profile = relationship(
        "AdminProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_users_role_active", "role", "is_active"),
    )

    @property
    def display_name(self) -> str:
        if self.role == "vendor" and self.vendor_profile and self.vendor_profile.company_name:
            return self.vendor_profile.company_name
        profile = self.customer_profile or self.admin_profile
        if profile and (profile.first_name or profile.last_name):
            return " ".join(p for p in (profile.first_name, profile.last_name) if p)
        return self.email.split("@")[0]


class CustomerProfile(Base):
    __tablename__ = "customer_profiles"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    address = Column(Text)
    phone_number = Column(String(50))
    is_federated = Column(Boolean, nullable=False, default=False)
    profile_complete = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="customer_profile")


class VendorProfile(Base):
    __tablename__ = "vendor_profiles"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    company_name = Column(String(255))
    owner_name = Column(String(255))
    company_address = Column(Text)
    contact_phone = Column(String(50))
    description = Column(Text)
    services_offered = Column(Text)
    profile_complete = Column(Boolean, nullable=False, default=False)
    verification_status = Column(
        String(20), nullable=False, default="pending"
    )  # pending | verified | rejected

    user = relationship("User", back_populates="vendor_profile")


class AdminProfile(Base):
    __tablename__ = "admin_profiles"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    title = Column(String(100))

    user = relationship("User", back_populates="admin_profile")


class UserSession(Base):
    """Login session keyed by an opaque cookie token."""

    __tablename__ = "sessions"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(128), unique=True, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("ix_sessions_user", "user_id"),
    )
