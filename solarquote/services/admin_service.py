"""Admin service — user oversight, vendor verification, marketplace listings."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, PersistenceFailure, ValidationFailed
from ..lifecycle import QUOTATION_STATUSES, REQUEST_STATUSES
from ..models import QuotationRequest, User, VendorProfile, VendorQuotation
from ..models.auth import VERIFICATION_STATUSES
from . import notification_service
from .auth_service import profile_to_dict
from .quotation_service import quotation_to_dict, request_to_dict

log = logging.getLogger(__name__)


# ── Users ────────────────────────────────────────────────────────────


def _user_row(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "role": u.role,
        "is_active": bool(u.is_active),
        "display_name": u.display_name,
        "profile": profile_to_dict(u),
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


def list_customers(db: Session) -> list[dict]:
    users = (
        db.query(User)
        .filter(User.role == "customer")
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    return [_user_row(u) for u in users]


def _check_filter(value: str, allowed: tuple, field: str, label: str) -> None:
    if value not in allowed:
        raise ValidationFailed(
            f"Invalid {label}. Must be one of: {', '.join(allowed)}", field=field
        )


def list_vendors(db: Session, verification_status: str | None = None) -> list[dict]:
    """All vendors, optionally filtered by verification status."""
    q = db.query(User).filter(User.role == "vendor")
    if verification_status:
        _check_filter(
            verification_status, VERIFICATION_STATUSES, "verification_status", "verification status"
        )
        q = q.join(VendorProfile, VendorProfile.user_id == User.id).filter(
            VendorProfile.verification_status == verification_status
        )
    users = q.order_by(User.created_at.desc(), User.id.desc()).all()
    return [_user_row(u) for u in users]


def set_vendor_verification(db: Session, vendor_id: int, status: str, admin_user: User) -> dict:
    if status not in VERIFICATION_STATUSES:
        raise ValidationFailed(
            f"Invalid verification status. Must be one of: {', '.join(VERIFICATION_STATUSES)}",
            field="verification_status",
        )
    vendor = db.get(User, vendor_id)
    if not vendor or vendor.role != "vendor" or not vendor.vendor_profile:
        raise NotFound("Vendor not found")

    old = vendor.vendor_profile.verification_status
    vendor.vendor_profile.verification_status = status
    db.commit()
    log.info(f"Admin {admin_user.email} set vendor {vendor.email} verification: {old} -> {status}")

    if old != status:
        notification_service.notify_user(
            db, vendor.id, "Verification Status Updated",
            f"Your vendor account verification status is now: {status}.",
        )
    return _user_row(vendor)


def set_user_active(db: Session, user_id: int, is_active: bool, admin_user: User) -> dict:
    """Activate or deactivate an account. Admins cannot deactivate themselves."""
    target = db.get(User, user_id)
    if not target:
        raise NotFound("User not found")
    if target.id == admin_user.id and not is_active:
        raise ValidationFailed("Cannot deactivate yourself", field="is_active")
    target.is_active = is_active
    db.commit()
    log.info(f"Admin {admin_user.email} set user {target.email} is_active={is_active}")
    return _user_row(target)


# ── Marketplace listings ─────────────────────────────────────────────


def list_requests(db: Session, status: str | None = None) -> list[dict]:
    """Every request, newest first, with customer email and quotation count."""
    counts = dict(
        db.query(VendorQuotation.request_id, func.count(VendorQuotation.id))
        .group_by(VendorQuotation.request_id)
        .all()
    )
    q = db.query(QuotationRequest)
    if status:
        _check_filter(status, REQUEST_STATUSES, "status", "request status")
        q = q.filter(QuotationRequest.status == status)
    out = []
    for r in q.order_by(QuotationRequest.created_at.desc(), QuotationRequest.id.desc()).all():
        d = request_to_dict(r, counts.get(r.id, 0))
        d["customer_email"] = r.customer.email if r.customer else None
        out.append(d)
    return out


def list_quotations(db: Session, status: str | None = None) -> list[dict]:
    q = db.query(VendorQuotation)
    if status:
        _check_filter(status, QUOTATION_STATUSES, "status", "quotation status")
        q = q.filter(VendorQuotation.status == status)
    rows = q.order_by(VendorQuotation.created_at.desc(), VendorQuotation.id.desc()).all()
    return [quotation_to_dict(q) for q in rows]


def marketplace_counts(db: Session) -> dict:
    """Headline counts for the admin dashboard."""
    try:
        users_by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
        requests_by_status = dict(
            db.query(QuotationRequest.status, func.count(QuotationRequest.id))
            .group_by(QuotationRequest.status)
            .all()
        )
        quotation_total = db.query(func.count(VendorQuotation.id)).scalar() or 0
    except SQLAlchemyError as e:
        log.error(f"Dashboard counts failed: {e}")
        raise PersistenceFailure("Failed to load marketplace statistics")
    return {
        "customers": users_by_role.get("customer", 0),
        "vendors": users_by_role.get("vendor", 0),
        "admins": users_by_role.get("admin", 0),
        "requests": sum(requests_by_status.values()),
        "requests_by_status": {
            s: requests_by_status.get(s, 0) for s in ("open", "in_progress", "closed")
        },
        "quotations": quotation_total,
    }
