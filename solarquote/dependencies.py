"""
dependencies.py — Shared FastAPI Dependencies

Session-cookie authentication and role gates. All routers import from here
instead of defining their own auth logic.

Business Rules:
- The session token is read from one place (the session cookie), synchronously
- get_user returns None if not logged in (non-throwing)
- require_user raises 401 for a missing, unknown, expired or inactive session
- require_roles(...) raises 401 when unauthenticated and 403 when the role
  is not allowed; the two never collapse into one another
- main.py turns 401/403 on page (non-/api) paths into redirects

Called by: all routers
Depends on: services/auth_service, database, config
"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models import User
from .services.auth_service import AccessOutcome, check_access, resolve_session_user


# ── Authentication ────────────────────────────────────────────────────


def get_session_token(request: Request) -> str | None:
    """The opaque session token carried by the request, if any."""
    return request.cookies.get(settings.session_cookie_name) or None


def get_user(request: Request, db: Session) -> User | None:
    """Return current user from the session cookie, or None if not logged in."""
    return resolve_session_user(db, get_session_token(request))


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: raises 401 if no authenticated user."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    return user


def require_roles(*roles: str):
    """Build a dependency admitting only the given roles."""

    def _dependency(request: Request, db: Session = Depends(get_db)) -> User:
        result = check_access(db, get_session_token(request), roles)
        if result.outcome is AccessOutcome.UNAUTHENTICATED:
            raise HTTPException(401, "Not authenticated")
        if result.outcome is AccessOutcome.FORBIDDEN:
            raise HTTPException(403, f"{' or '.join(r.title() for r in roles)} access required")
        return result.user

    _dependency.__name__ = f"require_{'_'.join(roles)}"
    return _dependency


require_customer = require_roles("customer")
require_vendor = require_roles("vendor")
require_admin = require_roles("admin")
