"""
schemas/quotations.py — Pydantic models for requests and vendor quotations

Business Rules:
- Request address must be non-blank; device_count and monthly_bill > 0
- Quotation price > 0; timeframe and warranty text non-blank
- Warranty text should contain a year count ("10 years") for ranking;
  text without digits is accepted and ranks as 0 years

Called by: routers/quotations.py
Depends on: pydantic
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class RequestCreate(BaseModel):
    address: str
    device_count: int = Field(gt=0)
    monthly_bill: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    notes: str | None = None

    @field_validator("address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class QuotationCreate(BaseModel):
    request_id: int
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    installation_timeframe: str
    warranty_period: str
    document_url: str | None = None
    notes: str | None = None

    @field_validator("installation_timeframe", "warranty_period")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v


class RequestOut(BaseModel):
    id: int
    customer_id: int
    address: str
    device_count: int
    monthly_bill: float
    notes: str | None = None
    status: str
    quotation_count: int = 0
    created_at: str | None = None
    updated_at: str | None = None
    closed_at: str | None = None


class QuotationOut(BaseModel):
    id: int
    request_id: int
    vendor_id: int
    company_name: str | None = None
    price: float
    installation_timeframe: str
    warranty_period: str
    document_url: str | None = None
    notes: str | None = None
    status: str
    created_at: str | None = None
    updated_at: str | None = None
