"""
routers/admin.py — Admin oversight endpoints

Business Rules:
- All endpoints require role admin
- Admins cannot deactivate themselves
- Verification changes notify the vendor (best effort)

Called by: main.py (router mount)
Depends on: services/admin_service, services/quotation_service, dependencies
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_admin
from ..models import User
from ..schemas.admin import UserUpdate, VerificationUpdate
from ..services import admin_service, quotation_service

router = APIRouter(tags=["admin"])


@router.get("/api/admin/customers")
async def list_customers(user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"customers": admin_service.list_customers(db)}


@router.get("/api/admin/vendors")
async def list_vendors(
    verification_status: str | None = None,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return {"vendors": admin_service.list_vendors(db, verification_status)}


@router.get("/api/admin/requests")
async def list_requests(
    status: str | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    return {"requests": admin_service.list_requests(db, status)}


@router.get("/api/admin/quotations")
async def list_quotations(
    status: str | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    return {"quotations": admin_service.list_quotations(db, status)}


@router.put("/api/admin/vendors/{vendor_id}/verification")
async def set_verification(
    vendor_id: int,
    payload: VerificationUpdate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.set_vendor_verification(db, vendor_id, payload.verification_status, user)


@router.put("/api/admin/users/{user_id}")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.set_user_active(db, user_id, payload.is_active, user)


@router.post("/api/admin/requests/{request_id}/close")
async def close_request(
    request_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    req = quotation_service.close_request(db, user, request_id)
    logger.info(f"Admin {user.email} closed request {req.id}")
    return quotation_service.request_to_dict(req)
