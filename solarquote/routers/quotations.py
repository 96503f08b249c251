"""
routers/quotations.py — Quotation request and vendor quotation routes

Customer routes work only on the caller's own requests (others are 404).
Vendor routes list open work and accept one quotation per request.

Business Rules:
- Viewing a request marks its submitted quotations viewed (until closed)
- Comparison needs at least two quotations; fewer returns comparable=false
- Lifecycle errors (InvalidTransition, Conflict) come from quotation_service

Called by: main.py (router mount)
Depends on: services/quotation_service, services/comparison_service, dependencies
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_customer, require_vendor
from ..models import User
from ..schemas.quotations import QuotationCreate, QuotationOut, RequestCreate, RequestOut
from ..services import comparison_service, quotation_service

router = APIRouter(tags=["quotations"])


# ── Customer ─────────────────────────────────────────────────────────


@router.post("/api/requests", status_code=201, response_model=RequestOut)
async def create_request(
    payload: RequestCreate, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    req = quotation_service.create_request(
        db, user, payload.address, payload.device_count, payload.monthly_bill, payload.notes
    )
    logger.info(f"Customer {user.id} opened request {req.id}")
    return quotation_service.request_to_dict(req, 0)


@router.get("/api/requests")
async def list_requests(user: User = Depends(require_customer), db: Session = Depends(get_db)):
    return {"requests": quotation_service.list_customer_requests(db, user)}


@router.get("/api/requests/{request_id}")
async def get_request(
    request_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    req = quotation_service.get_customer_request(db, user, request_id)
    quotation_service.mark_request_quotations_viewed(db, user, req)
    return {
        "request": quotation_service.request_to_dict(req),
        "quotations": [quotation_service.quotation_to_dict(q) for q in req.quotations],
    }


@router.post("/api/requests/{request_id}/close", response_model=RequestOut)
async def close_request(
    request_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    req = quotation_service.close_request(db, user, request_id)
    return quotation_service.request_to_dict(req)


@router.get("/api/requests/{request_id}/comparison")
async def compare_quotations(
    request_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    return comparison_service.compare_request(db, user, request_id)


@router.post("/api/quotations/{quotation_id}/view", response_model=QuotationOut)
async def view_quotation(
    quotation_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    q = quotation_service.mark_viewed(db, user, quotation_id)
    return quotation_service.quotation_to_dict(q)


@router.post("/api/quotations/{quotation_id}/accept", response_model=QuotationOut)
async def accept_quotation(
    quotation_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    q = quotation_service.accept_quotation(db, user, quotation_id)
    return quotation_service.quotation_to_dict(q)


@router.post("/api/quotations/{quotation_id}/reject", response_model=QuotationOut)
async def reject_quotation(
    quotation_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)
):
    q = quotation_service.reject_quotation(db, user, quotation_id)
    return quotation_service.quotation_to_dict(q)


# ── Vendor ───────────────────────────────────────────────────────────


@router.get("/api/vendor/requests")
async def vendor_requests(user: User = Depends(require_vendor), db: Session = Depends(get_db)):
    return {"requests": quotation_service.list_available_requests(db, user)}


@router.get("/api/vendor/requests/{request_id}")
async def vendor_request_detail(
    request_id: int, user: User = Depends(require_vendor), db: Session = Depends(get_db)
):
    return quotation_service.get_request_for_vendor(db, user, request_id)


@router.post("/api/quotations", status_code=201, response_model=QuotationOut)
async def submit_quotation(
    payload: QuotationCreate, user: User = Depends(require_vendor), db: Session = Depends(get_db)
):
    q = quotation_service.submit_quotation(
        db,
        user,
        payload.request_id,
        payload.price,
        payload.installation_timeframe,
        payload.warranty_period,
        document_url=payload.document_url,
        notes=payload.notes,
    )
    return quotation_service.quotation_to_dict(q)


@router.get("/api/vendor/quotations")
async def vendor_quotations(user: User = Depends(require_vendor), db: Session = Depends(get_db)):
    return {"quotations": quotation_service.list_vendor_quotations(db, user)}
