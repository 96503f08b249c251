"""
routers/dashboards.py — Role landing pages, redirect targets, health

Page paths are outside /api, so an auth failure here becomes a 303
redirect to /login (unauthenticated) or /unauthorized (wrong role); see
the HTTPException handler in main.py.

Called by: main.py (router mount)
Depends on: services/dashboard_service, dependencies
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import APP_VERSION, settings
from ..database import get_db
from ..dependencies import get_user, require_admin, require_customer, require_vendor
from ..models import User
from ..services import dashboard_service

router = APIRouter(tags=["pages"])

DASHBOARDS = {
    "customer": "/customer/dashboard",
    "vendor": "/vendor/dashboard",
    "admin": "/admin/dashboard",
}


@router.get("/customer/dashboard")
async def customer_dashboard(user: User = Depends(require_customer), db: Session = Depends(get_db)):
    return dashboard_service.customer_dashboard(db, user)


@router.get("/vendor/dashboard")
async def vendor_dashboard(user: User = Depends(require_vendor), db: Session = Depends(get_db)):
    return dashboard_service.vendor_dashboard(db, user)


@router.get("/admin/dashboard")
async def admin_dashboard(user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return dashboard_service.admin_dashboard(db, user)


@router.get(settings.login_path)
async def login_page(request: Request, db: Session = Depends(get_db)):
    user = get_user(request, db)
    if user:
        return {"logged_in": True, "dashboard": DASHBOARDS.get(user.role)}
    return {"logged_in": False, "login_endpoint": "/api/auth/login"}


@router.get(settings.unauthorized_path)
async def unauthorized_page(request: Request, db: Session = Depends(get_db)):
    user = get_user(request, db)
    return {
        "error": "You do not have access to that page",
        "dashboard": DASHBOARDS.get(user.role) if user else None,
    }


@router.get("/health")
async def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    body = {"status": "ok" if db_ok else "degraded", "version": APP_VERSION, "db": db_ok}
    return JSONResponse(body, status_code=200 if db_ok else 503)
