"""Quotation request and vendor quotation models."""

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base


class QuotationRequest(Base):
    """Installation quotation requested by a customer."""

    __tablename__ = "quotation_requests"
    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    address = Column(Text, nullable=False)
    device_count = Column(Integer, nullable=False)
    monthly_bill = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text)
    status = Column(String(20), nullable=False, default="open")  # open | in_progress | closed
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)
    closed_at = Column(UTCDateTime)

    customer = relationship("User", foreign_keys=[customer_id])
    quotations = relationship(
        "VendorQuotation",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="VendorQuotation.created_at",
    )

    __table_args__ = (
        Index("ix_qreq_customer", "customer_id"),
        Index("ix_qreq_status_created", "status", "created_at"),
    )


class VendorQuotation(Base):
    """A vendor's bid on one quotation request. One per (request, vendor)."""

    __tablename__ = "vendor_quotations"
    id = Column(Integer, primary_key=True)
    request_id = Column(
        Integer, ForeignKey("quotation_requests.id", ondelete="CASCADE"), nullable=False
    )
    vendor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    installation_timeframe = Column(String(255), nullable=False)
    warranty_period = Column(String(255), nullable=False)
    document_url = Column(String(500))
    notes = Column(Text)
    status = Column(
        String(20), nullable=False, default="submitted"
    )  # submitted | viewed | accepted | rejected
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    request = relationship("QuotationRequest", back_populates="quotations")
    vendor = relationship("User", foreign_keys=[vendor_id])

    __table_args__ = (
        UniqueConstraint("request_id", "vendor_id", name="uq_vquote_request_vendor"),
        Index("ix_vquote_vendor", "vendor_id"),
        Index("ix_vquote_status", "status"),
    )

    @property
    def company_name(self) -> str | None:
        if self.vendor and self.vendor.vendor_profile:
            return self.vendor.vendor_profile.company_name
        return None
