"""
conftest.py — Shared Test Fixtures for SolarQuote

Provides an in-memory SQLite database, FastAPI TestClients logged in as
each role via real session cookies, and factory fixtures for users,
quotation requests and vendor quotations.

Business Rules:
- All tests run against isolated in-memory DB (no prod data risk)
- Each test function gets a fresh schema (create_all / drop_all)
- Role clients authenticate with a real session row, not an override

Called by: all test files via pytest autodiscovery
Depends on: solarquote.models (Base), solarquote.database (get_db), services
"""

import os
os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from solarquote.config import settings
from solarquote.models import Base, QuotationRequest, User, VendorQuotation
from solarquote.services import auth_service

# ── In-memory SQLite engine ──────────────────────────────────────────

TEST_DB_URL = "sqlite://"  # in-memory, fresh per test

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


PASSWORD = "sunshine-123"


# ── Factories ────────────────────────────────────────────────────────


def make_customer(db: Session, email: str = "customer@example.com", **profile) -> User:
    data = {"first_name": "Casey", "last_name": "Customer"}
    data.update(profile)
    return auth_service.register_user(db, email, PASSWORD, "customer", data)


def make_vendor(
    db: Session, email: str = "vendor@example.com", company: str = "Bright Solar Ltd", **profile
) -> User:
    data = {
        "company_name": company,
        "owner_name": "Val Vendor",
        "company_address": "1 Panel Way",
        "contact_phone": "555-0100",
    }
    data.update(profile)
    return auth_service.register_user(db, email, PASSWORD, "vendor", data)


def make_request(db: Session, customer: User, **kw) -> QuotationRequest:
    req = QuotationRequest(
        customer_id=customer.id,
        address=kw.get("address", "42 Sunny Street"),
        device_count=kw.get("device_count", 12),
        monthly_bill=Decimal(str(kw.get("monthly_bill", "180.50"))),
        notes=kw.get("notes"),
        status=kw.get("status", "open"),
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    return req


def make_quotation(
    db: Session, request: QuotationRequest, vendor: User, price="12500.00",
    warranty="10 years", status="submitted", **kw,
) -> VendorQuotation:
    q = VendorQuotation(
        request_id=request.id,
        vendor_id=vendor.id,
        price=Decimal(str(price)),
        installation_timeframe=kw.get("installation_timeframe", "4 weeks"),
        warranty_period=warranty,
        status=status,
    )
    if kw.get("created_at") is not None:
        q.created_at = kw["created_at"]
    db.add(q)
    db.commit()
    db.refresh(q)
    return q


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def customer_user(db_session: Session) -> User:
    return make_customer(db_session)


@pytest.fixture()
def other_customer(db_session: Session) -> User:
    return make_customer(db_session, "other@example.com", first_name="Olive", last_name="Other")


@pytest.fixture()
def vendor_user(db_session: Session) -> User:
    return make_vendor(db_session)


@pytest.fixture()
def second_vendor(db_session: Session) -> User:
    return make_vendor(db_session, "vendor2@example.com", company="Sunrise Energy")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return auth_service.create_admin_user(
        db_session, "admin@example.com", PASSWORD, first_name="Ada", last_name="Admin"
    )


@pytest.fixture()
def quotation_request(db_session: Session, customer_user: User) -> QuotationRequest:
    """An open request owned by customer_user."""
    return make_request(db_session, customer_user)


@pytest.fixture()
def quotation(db_session, quotation_request, vendor_user) -> VendorQuotation:
    """A submitted quotation from vendor_user on quotation_request."""
    q = make_quotation(db_session, quotation_request, vendor_user)
    quotation_request.status = "in_progress"
    db_session.commit()
    return q


def _make_client(db_session: Session, user: User | None = None) -> TestClient:
    from solarquote.database import get_db
    from solarquote.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    c = TestClient(app)
    if user is not None:
        session = auth_service.start_session(db_session, user)
        c.cookies.set(settings.session_cookie_name, session.token)
    return c


@pytest.fixture()
def client(db_session: Session):
    """Anonymous TestClient bound to the test session."""
    from solarquote.main import app

    yield _make_client(db_session)
    app.dependency_overrides.clear()


@pytest.fixture()
def customer_client(db_session: Session, customer_user: User):
    from solarquote.main import app

    yield _make_client(db_session, customer_user)
    app.dependency_overrides.clear()


@pytest.fixture()
def vendor_client(db_session: Session, vendor_user: User):
    from solarquote.main import app

    yield _make_client(db_session, vendor_user)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(db_session: Session, admin_user: User):
    from solarquote.main import app

    yield _make_client(db_session, admin_user)
    app.dependency_overrides.clear()
