"""
auth_service.py — Registration, login sessions, and the access gate

Business Rules:
- Emails are stored trimmed and lowercased; one user per email
- Public registration creates customers or vendors only; admins come from
  create_admin_user (startup seed)
- User + role profile row are written in one transaction
- Federated accounts have no password and cannot use password login
- Sessions are opaque random tokens valid for settings.session_ttl_days
- check_access is read-only and never raises: it reports OK, FORBIDDEN or
  UNAUTHENTICATED

Called by: routers/auth.py, routers/profile endpoints, dependencies.py, startup.py
Depends on: models, config, errors
"""

import enum
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import utcnow
from ..errors import Conflict, InvalidCredentials, PersistenceFailure, ValidationFailed
from ..models import AdminProfile, CustomerProfile, User, UserSession, VendorProfile

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SELF_REGISTER_ROLES = ("customer", "vendor")
CUSTOMER_REQUIRED = ("first_name", "last_name")
VENDOR_REQUIRED = ("company_name", "owner_name", "company_address", "contact_phone")
CUSTOMER_FIELDS = ("first_name", "last_name", "address", "phone_number")
VENDOR_FIELDS = (
    "company_name", "owner_name", "company_address", "contact_phone",
    "description", "services_offered",
)


# ── Passwords & tokens ───────────────────────────────────────────────


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash or not password:
        return False
    return pwd_context.verify(password, password_hash)


def new_session_token() -> str:
    return secrets.token_urlsafe(48)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


# ── Registration ─────────────────────────────────────────────────────


def _clean(profile: dict | None, fields: tuple) -> dict:
    profile = profile or {}
    out = {}
    for f in fields:
        v = profile.get(f)
        if isinstance(v, str):
            v = v.strip() or None
        out[f] = v
    return out


def _customer_complete(p) -> bool:
    return all(getattr(p, f) for f in CUSTOMER_FIELDS)


def _vendor_complete(p) -> bool:
    return all(getattr(p, f) for f in VENDOR_REQUIRED)


def _ensure_email_free(db: Session, email: str) -> None:
    if db.query(User.id).filter(User.email == email).first():
        raise Conflict("User with this email already exists", field="email")


def _commit_new_user(db: Session, user: User) -> User:
    """Persist a user and its profile as one unit."""
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User with this email already exists", field="email")
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Registration failed for {user.email}: {e}")
        raise PersistenceFailure("Error creating user")
    db.refresh(user)
    return user


def register_user(
    db: Session, email: str, password: str, role: str, profile: dict | None = None
) -> User:
    """Create a customer or vendor account with its profile row."""
    email = normalize_email(email)
    if not email or not password:
        raise ValidationFailed("Email and password are required")
    if role not in SELF_REGISTER_ROLES:
        raise ValidationFailed("Invalid user type", field="role")

    if role == "customer":
        data = _clean(profile, CUSTOMER_FIELDS)
        missing = [f for f in CUSTOMER_REQUIRED if not data[f]]
        if missing:
            raise ValidationFailed(
                "First name and last name are required for customers", field=missing[0]
            )
    else:
        data = _clean(profile, VENDOR_FIELDS)
        missing = [f for f in VENDOR_REQUIRED if not data[f]]
        if missing:
            raise ValidationFailed(
                "Company name, owner name, company address, and contact phone "
                "are required for vendors",
                field=missing[0],
            )

    _ensure_email_free(db, email)

    user = User(email=email, password_hash=hash_password(password), role=role, is_active=True)
    if role == "customer":
        p = CustomerProfile(**data, is_federated=False)
        p.profile_complete = _customer_complete(p)
        user.customer_profile = p
    else:
        p = VendorProfile(**data, verification_status="pending")
        p.profile_complete = _vendor_complete(p)
        user.vendor_profile = p

    user = _commit_new_user(db, user)
    log.info(f"Registered {role} {email} (id={user.id})")
    return user


def register_federated_customer(
    db: Session, email: str, first_name: str | None = None, last_name: str | None = None
) -> User:
    """Return the customer for a federated identity, creating it on first sight."""
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email is required", field="email")
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        if existing.role != "customer":
            raise Conflict("Email is registered to a non-customer account", field="email")
        return existing

    user = User(email=email, password_hash=None, role="customer", is_active=True)
    user.customer_profile = CustomerProfile(
        first_name=first_name, last_name=last_name, is_federated=True, profile_complete=False,
    )
    user = _commit_new_user(db, user)
    log.info(f"Registered federated customer {email} (id={user.id})")
    return user


def create_admin_user(
    db: Session,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    title: str | None = None,
) -> User:
    email = normalize_email(email)
    if not email or not password:
        raise ValidationFailed("Email and password are required")
    _ensure_email_free(db, email)
    user = User(email=email, password_hash=hash_password(password), role="admin", is_active=True)
    user.admin_profile = AdminProfile(first_name=first_name, last_name=last_name, title=title)
    user = _commit_new_user(db, user)
    log.info(f"Created admin {email} (id={user.id})")
    return user


# ── Sessions ─────────────────────────────────────────────────────────


def start_session(db: Session, user: User) -> UserSession:
    """Issue a new session token; drops this user's expired sessions."""
    now = utcnow()
    db.query(UserSession).filter(
        UserSession.user_id == user.id, UserSession.expires_at <= now
    ).delete(synchronize_session=False)
    session = UserSession(
        user_id=user.id,
        token=new_session_token(),
        expires_at=now + timedelta(days=settings.session_ttl_days),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def login(db: Session, email: str, password: str) -> tuple[User, UserSession]:
    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        log.info(f"Login failed: unknown email {email}")
        raise InvalidCredentials("Invalid email or password")
    if not user.is_active:
        log.info(f"Login refused: inactive account {email}")
        raise InvalidCredentials("Account is inactive")
    if not verify_password(password, user.password_hash):
        log.info(f"Login failed: bad password for {email}")
        raise InvalidCredentials("Invalid email or password")
    session = start_session(db, user)
    log.info(f"Login: {email} ({user.role})")
    return user, session


def logout(db: Session, token: str) -> bool:
    """Delete the session for this token. Returns False if none existed."""
    deleted = db.query(UserSession).filter(UserSession.token == token).delete(
        synchronize_session=False
    )
    db.commit()
    return bool(deleted)


# ── Access gate ──────────────────────────────────────────────────────


class AccessOutcome(str, enum.Enum):
    OK = "ok"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass
class AccessResult:
    outcome: AccessOutcome
    user: User | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is AccessOutcome.OK


def resolve_session_user(db: Session, token: str | None) -> User | None:
    """Active user owning an unexpired session, or None."""
    if not token:
        return None
    try:
        session = db.query(UserSession).filter(UserSession.token == token).first()
        if not session or session.expires_at <= utcnow():
            return None
        user = db.get(User, session.user_id)
    except SQLAlchemyError as e:
        log.error(f"Session lookup failed: {e}")
        return None
    if not user or not user.is_active:
        return None
    return user


def check_access(db: Session, token: str | None, allowed_roles=()) -> AccessResult:
    user = resolve_session_user(db, token)
    if user is None:
        return AccessResult(AccessOutcome.UNAUTHENTICATED)
    if allowed_roles and user.role not in allowed_roles:
        return AccessResult(AccessOutcome.FORBIDDEN, user)
    return AccessResult(AccessOutcome.OK, user)


# ── Profiles ─────────────────────────────────────────────────────────


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "is_active": bool(user.is_active),
    }


def profile_to_dict(user: User) -> dict | None:
    if user.role == "customer" and user.customer_profile:
        p = user.customer_profile
        out = {f: getattr(p, f) for f in CUSTOMER_FIELDS}
        out.update(is_federated=p.is_federated, profile_complete=p.profile_complete)
        return out
    if user.role == "vendor" and user.vendor_profile:
        p = user.vendor_profile
        out = {f: getattr(p, f) for f in VENDOR_FIELDS}
        out.update(
            profile_complete=p.profile_complete, verification_status=p.verification_status
        )
        return out
    if user.role == "admin" and user.admin_profile:
        p = user.admin_profile
        return {"first_name": p.first_name, "last_name": p.last_name, "title": p.title}
    return None


def update_profile(db: Session, user: User, updates: dict) -> dict:
    """Apply profile edits for the user's own role and recompute completeness."""
    if user.role == "customer":
        p = user.customer_profile or CustomerProfile(user_id=user.id)
        fields, required = CUSTOMER_FIELDS, CUSTOMER_REQUIRED
    elif user.role == "vendor":
        p = user.vendor_profile or VendorProfile(user_id=user.id)
        fields, required = VENDOR_FIELDS, VENDOR_REQUIRED
    else:
        raise ValidationFailed("Admin profiles are managed by the system")

    cleaned = _clean({k: v for k, v in updates.items() if v is not None}, fields)
    for f in required:
        if f in updates and updates[f] is not None and not cleaned[f]:
            raise ValidationFailed(f"{f.replace('_', ' ').capitalize()} cannot be empty", field=f)
    for f in fields:
        if f in updates and updates[f] is not None:
            setattr(p, f, cleaned[f])

    if user.role == "customer":
        p.profile_complete = _customer_complete(p)
        user.customer_profile = p
    else:
        p.profile_complete = _vendor_complete(p)
        user.vendor_profile = p
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Profile update failed for {user.email}: {e}")
        raise PersistenceFailure("Error updating profile")
    db.refresh(user)
    return profile_to_dict(user)
