"""Comparison service — ranks a customer's quotations for one request.

Loads the owner's quotations, hands them to ranking.rank_quotations, and
decorates the result with vendor company names and statuses. Fewer than
settings.comparison_min_quotations quotations yields comparable=False.
"""

import logging

from sqlalchemy.orm import Session

from ..config import settings
from ..models import User, VendorQuotation
from ..ranking import rank_quotations
from .quotation_service import get_customer_request

log = logging.getLogger(__name__)


def _decorate(entry: dict | None, by_id: dict) -> dict | None:
    if entry is None:
        return None
    q = by_id[entry["id"]]
    entry.update(
        vendor_id=q.vendor_id,
        company_name=q.company_name,
        installation_timeframe=q.installation_timeframe,
        warranty_period=q.warranty_period,
        status=q.status,
    )
    return entry


def compare_request(db: Session, customer: User, request_id: int) -> dict:
    req = get_customer_request(db, customer, request_id)
    quotations = (
        db.query(VendorQuotation)
        .filter(VendorQuotation.request_id == req.id)
        .order_by(VendorQuotation.created_at, VendorQuotation.id)
        .all()
    )
    result = {"request_id": req.id, "quotation_count": len(quotations)}
    if len(quotations) < settings.comparison_min_quotations:
        result["comparable"] = False
        return result

    ranking = rank_quotations(quotations)
    by_id = {q.id: q for q in quotations}
    data = ranking.to_dict()
    data["by_price"] = [_decorate(e, by_id) for e in data["by_price"]]
    for key in ("recommended", "lowest_price", "longest_warranty"):
        data[key] = _decorate(data[key], by_id)

    log.info(
        f"Comparison for request {req.id}: {len(quotations)} quotations, "
        f"recommended {data['recommended']['id']}"
    )
    result["comparable"] = True
    result.update(data)
    return result
