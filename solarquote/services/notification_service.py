"""Notification service — in-app feed writes and reads.

Fan-out helpers (notify_vendors_new_request, notify_customer_new_quotation)
are best effort: they run after the primary transaction has committed, and
any failure is logged and swallowed so it never undoes a submission.

Usage:
    from solarquote.services.notification_service import list_for_user, unread_count
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFound
from ..models import Notification, QuotationRequest, User, VendorQuotation

log = logging.getLogger("solarquote.notifications")


# ═══════════════════════════════════════════════════════════════════════
#  FAN-OUT — side effects of request / quotation creation
# ═══════════════════════════════════════════════════════════════════════


def notify_vendors_new_request(db: Session, request: QuotationRequest) -> int:
    """Notify every active vendor about a new request. Returns count sent."""
    try:
        vendor_ids = [
            row.id
            for row in db.query(User.id).filter(User.role == "vendor", User.is_active.is_(True))
        ]
        for vid in vendor_ids:
            db.add(
                Notification(
                    user_id=vid,
                    title="New Quotation Request",
                    message=(
                        "A new quotation request has been submitted for a property with a "
                        f"monthly electricity bill of ${float(request.monthly_bill):,.2f}. "
                        "View the details and submit your quotation."
                    ),
                    notification_type="new_request",
                    related_id=request.id,
                )
            )
        db.commit()
        return len(vendor_ids)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Vendor notification failed for request {request.id}: {e}")
        return 0


def notify_customer_new_quotation(db: Session, quotation: VendorQuotation) -> bool:
    """Tell the request owner a vendor has quoted."""
    try:
        request = db.get(QuotationRequest, quotation.request_id)
        if not request:
            return False
        company = quotation.company_name or "A vendor"
        db.add(
            Notification(
                user_id=request.customer_id,
                title="New Quotation Received",
                message=f"{company} has submitted a quotation for your request. View the details.",
                notification_type="new_quotation",
                related_id=quotation.id,
            )
        )
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Customer notification failed for quotation {quotation.id}: {e}")
        return False


def notify_user(
    db: Session, user_id: int, title: str, message: str, related_id: int | None = None
) -> bool:
    """System notification to one user (best effort)."""
    try:
        db.add(
            Notification(
                user_id=user_id,
                title=title,
                message=message,
                notification_type="system",
                related_id=related_id,
            )
        )
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"System notification to user {user_id} failed: {e}")
        return False


# ═══════════════════════════════════════════════════════════════════════
#  FEED — per-user reads and read-flag updates
# ═══════════════════════════════════════════════════════════════════════


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "is_read": bool(n.is_read),
        "notification_type": n.notification_type,
        "related_id": n.related_id,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


def list_for_user(db: Session, user_id: int, limit: int | None = None) -> list[Notification]:
    """Newest first."""
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit or settings.notification_feed_limit)
        .all()
    )


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    """Only the recipient may mark a notification; anyone else gets NotFound."""
    n = db.get(Notification, notification_id)
    if not n or n.user_id != user_id:
        raise NotFound("Notification not found")
    if not n.is_read:
        n.is_read = True
        db.commit()
    return n


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
