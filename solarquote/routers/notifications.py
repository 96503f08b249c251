"""
routers/notifications.py — In-app notification feed

Any authenticated role. A notification can only be read or marked by its
recipient; anyone else gets 404.

Called by: main.py (router mount)
Depends on: services/notification_service, dependencies
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..services import notification_service

router = APIRouter(tags=["notifications"])


@router.get("/api/notifications")
async def list_notifications(
    limit: int = Query(settings.notification_feed_limit, ge=1, le=100),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    items = notification_service.list_for_user(db, user.id, limit)
    return {
        "notifications": [notification_service.notification_to_dict(n) for n in items],
        "unread_count": notification_service.unread_count(db, user.id),
    }


@router.get("/api/notifications/unread-count")
async def unread_count(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"unread_count": notification_service.unread_count(db, user.id)}


@router.post("/api/notifications/read-all")
async def mark_all_read(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"ok": True, "updated": notification_service.mark_all_read(db, user.id)}


@router.post("/api/notifications/{notification_id}/read")
async def mark_read(
    notification_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    n = notification_service.mark_read(db, user.id, notification_id)
    return notification_service.notification_to_dict(n)
