"""In-app notification feed."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text

from ..database import UTCDateTime, utcnow
from .base import Base


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    notification_type = Column(String(20), nullable=False)  # new_request | new_quotation | system
    related_id = Column(Integer)
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )
