"""
schemas/admin.py — Pydantic models for admin endpoints

Called by: routers/admin.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class VerificationUpdate(BaseModel):
    verification_status: Literal["pending", "verified", "rejected"]


class UserUpdate(BaseModel):
    is_active: bool
