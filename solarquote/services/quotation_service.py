"""
quotation_service.py — Quotation requests, vendor quotations, and their lifecycle

Business Rules:
- Customers own their requests; another customer asking for one gets NotFound
- A request starts open; the first vendor quotation moves it to in_progress
  in the same transaction as the insert (conditional UPDATE, so concurrent
  first quotations are harmless)
- One quotation per (request, vendor): pre-checked here, enforced by the
  uq_vquote_request_vendor constraint
- Closed requests accept no new quotations and no quotation status changes
- Accepting a quotation closes its request; siblings keep their status
- Notifications fire after commit and never fail the operation

Called by: routers/quotations.py, routers/admin.py, services/dashboard_service.py
Depends on: models, lifecycle, errors, services/notification_service
"""

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import utcnow
from ..errors import Conflict, InvalidTransition, NotFound, PersistenceFailure, ValidationFailed
from ..lifecycle import QUOTATION, REQUEST, can_transition, ensure_transition
from ..models import QuotationRequest, User, VendorQuotation
from . import notification_service

log = logging.getLogger(__name__)

VENDOR_VISIBLE_STATUSES = ("open", "in_progress")


# ── Serialization ────────────────────────────────────────────────────


def quotation_to_dict(q: VendorQuotation) -> dict:
    return {
        "id": q.id,
        "request_id": q.request_id,
        "vendor_id": q.vendor_id,
        "company_name": q.company_name,
        "price": float(q.price) if q.price is not None else None,
        "installation_timeframe": q.installation_timeframe,
        "warranty_period": q.warranty_period,
        "document_url": q.document_url,
        "notes": q.notes,
        "status": q.status,
        "created_at": q.created_at.isoformat() if q.created_at else None,
        "updated_at": q.updated_at.isoformat() if q.updated_at else None,
    }


def request_to_dict(req: QuotationRequest, quotation_count: int | None = None) -> dict:
    return {
        "id": req.id,
        "customer_id": req.customer_id,
        "address": req.address,
        "device_count": req.device_count,
        "monthly_bill": float(req.monthly_bill) if req.monthly_bill is not None else None,
        "notes": req.notes,
        "status": req.status,
        "quotation_count": (
            quotation_count if quotation_count is not None else len(req.quotations)
        ),
        "created_at": req.created_at.isoformat() if req.created_at else None,
        "updated_at": req.updated_at.isoformat() if req.updated_at else None,
        "closed_at": req.closed_at.isoformat() if req.closed_at else None,
    }


# ── Validation helpers ───────────────────────────────────────────────


def _positive_decimal(value, field: str) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a number", field=field)
    if not d.is_finite() or d <= 0:
        raise ValidationFailed(f"{field} must be greater than zero", field=field)
    return d


def _required_text(value, field: str) -> str:
    v = (value or "").strip() if isinstance(value, str) else value
    if not v:
        raise ValidationFailed(f"{field} is required", field=field)
    return v


def _optional_text(value) -> str | None:
    if isinstance(value, str):
        value = value.strip()
    return value or None


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"{action} failed: {e}")
        raise PersistenceFailure(f"Failed to {action}")


# ── Requests (customer side) ─────────────────────────────────────────


def create_request(
    db: Session,
    customer: User,
    address: str,
    device_count: int,
    monthly_bill,
    notes: str | None = None,
) -> QuotationRequest:
    """Create an open request and notify active vendors."""
    address = _required_text(address, "address")
    if not isinstance(device_count, int) or isinstance(device_count, bool) or device_count <= 0:
        raise ValidationFailed("device_count must be a positive whole number", field="device_count")
    bill = _positive_decimal(monthly_bill, "monthly_bill")

    req = QuotationRequest(
        customer_id=customer.id,
        address=address,
        device_count=device_count,
        monthly_bill=bill,
        notes=_optional_text(notes),
        status="open",
    )
    db.add(req)
    _commit(db, "create quotation request")
    db.refresh(req)
    log.info(f"Quotation request {req.id} created by customer {customer.id}")

    notification_service.notify_vendors_new_request(db, req)
    return req


def list_customer_requests(db: Session, customer: User) -> list[dict]:
    """Customer's requests, newest first, with quotation counts."""
    counts = dict(
        db.query(VendorQuotation.request_id, func.count(VendorQuotation.id))
        .join(QuotationRequest, QuotationRequest.id == VendorQuotation.request_id)
        .filter(QuotationRequest.customer_id == customer.id)
        .group_by(VendorQuotation.request_id)
        .all()
    )
    reqs = (
        db.query(QuotationRequest)
        .filter(QuotationRequest.customer_id == customer.id)
        .order_by(QuotationRequest.created_at.desc(), QuotationRequest.id.desc())
        .all()
    )
    return [request_to_dict(r, counts.get(r.id, 0)) for r in reqs]


def get_customer_request(db: Session, customer: User, request_id: int) -> QuotationRequest:
    req = db.get(QuotationRequest, request_id)
    if not req or req.customer_id != customer.id:
        raise NotFound("Quotation request not found")
    return req


def close_request(db: Session, user: User, request_id: int) -> QuotationRequest:
    """Owning customer or an admin closes a request (terminal)."""
    req = db.get(QuotationRequest, request_id)
    if not req or (user.role != "admin" and req.customer_id != user.id):
        raise NotFound("Quotation request not found")
    ensure_transition(REQUEST, req.status, "closed")
    req.status = "closed"
    req.closed_at = utcnow()
    _commit(db, "close quotation request")
    log.info(f"Quotation request {req.id} closed by {user.role} {user.id}")
    return req


# ── Quotations (vendor side) ─────────────────────────────────────────


def _existing_quotation(db: Session, request_id: int, vendor_id: int) -> VendorQuotation | None:
    return (
        db.query(VendorQuotation)
        .filter(VendorQuotation.request_id == request_id, VendorQuotation.vendor_id == vendor_id)
        .first()
    )


def submit_quotation(
    db: Session,
    vendor: User,
    request_id: int,
    price,
    installation_timeframe: str,
    warranty_period: str,
    document_url: str | None = None,
    notes: str | None = None,
) -> VendorQuotation:
    """Insert a vendor quotation and advance the request in one transaction."""
    price = _positive_decimal(price, "price")
    installation_timeframe = _required_text(installation_timeframe, "installation_timeframe")
    warranty_period = _required_text(warranty_period, "warranty_period")

    req = db.get(QuotationRequest, request_id)
    if not req:
        raise NotFound("Quotation request not found")
    if req.status == "closed":
        raise InvalidTransition("Quotation request is closed")
    if _existing_quotation(db, request_id, vendor.id):
        raise Conflict("You have already submitted a quotation for this request")

    quotation = VendorQuotation(
        request_id=request_id,
        vendor_id=vendor.id,
        price=price,
        installation_timeframe=installation_timeframe,
        warranty_period=warranty_period,
        document_url=_optional_text(document_url),
        notes=_optional_text(notes),
        status="submitted",
    )
    try:
        # Row lock on PostgreSQL; serializes with a concurrent close_request.
        current = (
            db.query(QuotationRequest.status)
            .filter(QuotationRequest.id == request_id)
            .with_for_update()
            .scalar()
        )
        if current == "closed":
            db.rollback()
            raise InvalidTransition("Quotation request is closed")
        db.add(quotation)
        db.flush()
        if can_transition(REQUEST, req.status, "in_progress"):
            db.query(QuotationRequest).filter(
                QuotationRequest.id == request_id, QuotationRequest.status == "open"
            ).update(
                {QuotationRequest.status: "in_progress", QuotationRequest.updated_at: utcnow()},
                synchronize_session=False,
            )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You have already submitted a quotation for this request")
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Quotation submit failed (request {request_id}, vendor {vendor.id}): {e}")
        raise PersistenceFailure("Failed to submit quotation")

    db.refresh(quotation)
    db.refresh(req)
    log.info(
        f"Quotation {quotation.id} submitted by vendor {vendor.id} "
        f"for request {request_id} (request now {req.status})"
    )
    notification_service.notify_customer_new_quotation(db, quotation)
    return quotation


def list_available_requests(db: Session, vendor: User) -> list[dict]:
    """Open and in-progress requests, newest first, flagged if already quoted."""
    quoted = {
        rid
        for (rid,) in db.query(VendorQuotation.request_id).filter(
            VendorQuotation.vendor_id == vendor.id
        )
    }
    reqs = (
        db.query(QuotationRequest)
        .filter(QuotationRequest.status.in_(VENDOR_VISIBLE_STATUSES))
        .order_by(QuotationRequest.created_at.desc(), QuotationRequest.id.desc())
        .all()
    )
    out = []
    for r in reqs:
        d = request_to_dict(r)
        d["already_quoted"] = r.id in quoted
        out.append(d)
    return out


def get_request_for_vendor(db: Session, vendor: User, request_id: int) -> dict:
    """Request detail for a vendor: visible while open, or if they quoted it."""
    req = db.get(QuotationRequest, request_id)
    if not req:
        raise NotFound("Quotation request not found")
    mine = _existing_quotation(db, request_id, vendor.id)
    if req.status not in VENDOR_VISIBLE_STATUSES and not mine:
        raise NotFound("Quotation request not found")
    d = request_to_dict(req)
    d["already_quoted"] = mine is not None
    d["my_quotation"] = quotation_to_dict(mine) if mine else None
    return d


def list_vendor_quotations(db: Session, vendor: User) -> list[dict]:
    """Vendor's own quotations, newest first, with request context."""
    rows = (
        db.query(VendorQuotation, QuotationRequest)
        .join(QuotationRequest, QuotationRequest.id == VendorQuotation.request_id)
        .filter(VendorQuotation.vendor_id == vendor.id)
        .order_by(VendorQuotation.created_at.desc(), VendorQuotation.id.desc())
        .all()
    )
    out = []
    for q, req in rows:
        d = quotation_to_dict(q)
        d["request_address"] = req.address
        d["request_monthly_bill"] = float(req.monthly_bill)
        d["request_status"] = req.status
        out.append(d)
    return out


# ── Quotation status changes (customer side) ─────────────────────────


def _owned_quotation(db: Session, customer: User, quotation_id: int) -> VendorQuotation:
    q = db.get(VendorQuotation, quotation_id)
    if not q or q.request.customer_id != customer.id:
        raise NotFound("Quotation not found")
    return q


def _ensure_request_open_for_changes(req: QuotationRequest) -> None:
    if req.status == "closed":
        raise InvalidTransition("Quotation request is already closed")


def mark_viewed(db: Session, customer: User, quotation_id: int) -> VendorQuotation:
    """submitted → viewed. Anything else (or a closed request) is left as is."""
    q = _owned_quotation(db, customer, quotation_id)
    if q.request.status != "closed" and can_transition(QUOTATION, q.status, "viewed"):
        q.status = "viewed"
        _commit(db, "mark quotation viewed")
    return q


def mark_request_quotations_viewed(db: Session, customer: User, req: QuotationRequest) -> int:
    """Mark all submitted quotations of an owned request as viewed."""
    if req.customer_id != customer.id or req.status == "closed":
        return 0
    changed = 0
    for q in req.quotations:
        if can_transition(QUOTATION, q.status, "viewed"):
            q.status = "viewed"
            changed += 1
    if changed:
        _commit(db, "mark quotations viewed")
    return changed


def accept_quotation(db: Session, customer: User, quotation_id: int) -> VendorQuotation:
    """Accept one quotation and close its request."""
    q = _owned_quotation(db, customer, quotation_id)
    req = q.request
    _ensure_request_open_for_changes(req)
    ensure_transition(QUOTATION, q.status, "accepted")

    already = (
        db.query(VendorQuotation.id)
        .filter(
            VendorQuotation.request_id == req.id,
            VendorQuotation.status == "accepted",
            VendorQuotation.id != q.id,
        )
        .first()
    )
    if already:
        raise Conflict("Another quotation has already been accepted for this request")

    ensure_transition(REQUEST, req.status, "closed")
    now = utcnow()
    q.status = "accepted"
    req.status = "closed"
    req.closed_at = now
    _commit(db, "accept quotation")
    log.info(f"Quotation {q.id} accepted by customer {customer.id}; request {req.id} closed")

    notification_service.notify_user(
        db, q.vendor_id, "Quotation Accepted",
        "Your quotation has been accepted by the customer.", related_id=q.id,
    )
    return q


def reject_quotation(db: Session, customer: User, quotation_id: int) -> VendorQuotation:
    q = _owned_quotation(db, customer, quotation_id)
    _ensure_request_open_for_changes(q.request)
    ensure_transition(QUOTATION, q.status, "rejected")
    q.status = "rejected"
    _commit(db, "reject quotation")
    log.info(f"Quotation {q.id} rejected by customer {customer.id}")

    notification_service.notify_user(
        db, q.vendor_id, "Quotation Declined",
        "The customer has declined your quotation.", related_id=q.id,
    )
    return q
