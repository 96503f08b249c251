"""
startup.py — Database Startup Migrations (Idempotent)

Tables, constraints and indexes are defined in the ORM models and created via
Base.metadata.create_all(checkfirst=True). This file also seeds the first
admin account from settings when one is configured.

Called by: main.py lifespan
Depends on: database.py (engine), models (Base), services/auth_service
"""

import logging
import os

from .config import settings
from .database import SessionLocal, engine

log = logging.getLogger(__name__)


def run_startup_migrations() -> None:
    """Execute all idempotent startup operations. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode — skipping startup migrations")
        return

    from .models import Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")

    _seed_admin()
    log.info("Startup migrations complete")


def _seed_admin() -> None:
    """Create the configured admin account if it does not exist yet."""
    if not (settings.admin_email and settings.admin_password):
        return
    from .models import User
    from .services.auth_service import create_admin_user, normalize_email

    db = SessionLocal()
    try:
        if db.query(User.id).filter(User.email == normalize_email(settings.admin_email)).first():
            return
        create_admin_user(db, settings.admin_email, settings.admin_password, title="Administrator")
        log.info(f"Seeded admin account {settings.admin_email}")
    finally:
        db.close()
