"""
routers/auth.py — Registration, login sessions and own-profile routes

Business Rules:
- Login sets the session cookie {httponly, secure in production,
  max-age session_ttl_days, path=/}; logout deletes the session row and
  clears the cookie
- Auth endpoints are rate limited (settings.rate_limit_auth)
- Service exceptions (Conflict, InvalidCredentials, ValidationFailed)
  propagate to the handlers in main.py

Called by: main.py (router mount)
Depends on: services/auth_service, dependencies, rate_limit, schemas/auth
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_session_token, require_user
from ..models import User
from ..rate_limit import limiter
from ..schemas.auth import LoginIn, ProfileUpdate, RegisterIn, UserOut
from ..services import auth_service

router = APIRouter(tags=["auth"])


@router.post("/api/auth/register", status_code=201, response_model=UserOut)
@limiter.limit(settings.rate_limit_auth)
async def register(request: Request, payload: RegisterIn, db: Session = Depends(get_db)):
    user = auth_service.register_user(
        db, payload.email, payload.password, payload.role, payload.profile()
    )
    return auth_service.user_to_dict(user)


@router.post("/api/auth/login")
@limiter.limit(settings.rate_limit_auth)
async def login(request: Request, payload: LoginIn, db: Session = Depends(get_db)):
    user, session = auth_service.login(db, payload.email, payload.password)
    resp = JSONResponse({"ok": True, "user": auth_service.user_to_dict(user)})
    resp.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        max_age=settings.session_ttl_days * 24 * 3600,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return resp


@router.post("/api/auth/logout")
async def logout(request: Request, db: Session = Depends(get_db)):
    token = get_session_token(request)
    if not token or not auth_service.logout(db, token):
        raise HTTPException(400, "Not logged in")
    logger.info("Session logged out")
    resp = JSONResponse({"ok": True})
    resp.delete_cookie(settings.session_cookie_name, path="/")
    return resp


@router.get("/api/auth/me")
async def me(user: User = Depends(require_user)):
    return {**auth_service.user_to_dict(user), "profile": auth_service.profile_to_dict(user)}


@router.get("/api/profile")
async def get_profile(user: User = Depends(require_user)):
    return {"role": user.role, "profile": auth_service.profile_to_dict(user)}


@router.put("/api/profile")
async def update_profile(
    payload: ProfileUpdate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    profile = auth_service.update_profile(db, user, payload.model_dump(exclude_unset=True))
    logger.info(f"Profile updated for user {user.id}")
    return {"role": user.role, "profile": profile}
