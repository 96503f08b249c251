"""
schemas/auth.py — Pydantic models for registration, login and profiles

Business Rules:
- Email must contain "@"; it is trimmed and lowercased by the service
- Password must be at least 8 characters
- Public registration accepts role customer or vendor only
- Role-specific required profile fields are checked by auth_service

Called by: routers/auth.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _email(v: str) -> str:
    v = v.strip()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class RegisterIn(BaseModel):
    email: str
    password: str = Field(min_length=8)
    role: Literal["customer", "vendor"]

    # Customer
    first_name: str | None = None
    last_name: str | None = None
    address: str | None = None
    phone_number: str | None = None

    # Vendor
    company_name: str | None = None
    owner_name: str | None = None
    company_address: str | None = None
    contact_phone: str | None = None
    description: str | None = None
    services_offered: str | None = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _email(v)

    def profile(self) -> dict:
        return self.model_dump(exclude={"email", "password", "role"})


class LoginIn(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _email(v)


class ProfileUpdate(BaseModel):
    """Partial profile edit; fields not for the caller's role are ignored."""
    first_name: str | None = None
    last_name: str | None = None
    address: str | None = None
    phone_number: str | None = None
    company_name: str | None = None
    owner_name: str | None = None
    company_address: str | None = None
    contact_phone: str | None = None
    description: str | None = None
    services_offered: str | None = None


class UserOut(BaseModel):
    id: int
    email: str
    role: str
    is_active: bool
