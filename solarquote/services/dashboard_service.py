"""Dashboard payloads for the three role landing pages.

Each builder returns a plain dict the page entry points serialize as JSON.
"""

from sqlalchemy.orm import Session

from ..models import QuotationRequest, User, VendorQuotation
from . import admin_service, notification_service, quotation_service
from .auth_service import profile_to_dict, user_to_dict

RECENT_LIMIT = 5


def _common(db: Session, user: User) -> dict:
    return {
        "user": user_to_dict(user),
        "display_name": user.display_name,
        "profile": profile_to_dict(user),
        "unread_notifications": notification_service.unread_count(db, user.id),
    }


def customer_dashboard(db: Session, user: User) -> dict:
    requests = quotation_service.list_customer_requests(db, user)
    out = _common(db, user)
    out.update(
        requests=requests,
        open_requests=sum(1 for r in requests if r["status"] != "closed"),
        total_quotations=sum(r["quotation_count"] for r in requests),
    )
    return out


def vendor_dashboard(db: Session, user: User) -> dict:
    available = quotation_service.list_available_requests(db, user)
    mine = quotation_service.list_vendor_quotations(db, user)
    out = _common(db, user)
    out.update(
        available_requests=available,
        quotations=mine,
        accepted_quotations=sum(1 for q in mine if q["status"] == "accepted"),
        verification_status=(
            user.vendor_profile.verification_status if user.vendor_profile else None
        ),
    )
    return out


def admin_dashboard(db: Session, user: User) -> dict:
    recent_requests = (
        db.query(QuotationRequest)
        .order_by(QuotationRequest.created_at.desc(), QuotationRequest.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    recent_quotations = (
        db.query(VendorQuotation)
        .order_by(VendorQuotation.created_at.desc(), VendorQuotation.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    out = _common(db, user)
    out.update(
        stats=admin_service.marketplace_counts(db),
        recent_requests=[quotation_service.request_to_dict(r) for r in recent_requests],
        recent_quotations=[quotation_service.quotation_to_dict(q) for q in recent_quotations],
    )
    return out
