"""Notification-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..models.notification import NotificationType


class MarkReadRequest(BaseModel):
    """Request schema for marking a notification as read."""

    notification_id: int = Field(..., ge=1, description="Notification to mark")


class Notification(BaseModel):
    """Notification response schema."""

    id: int = Field(..., description="Unique notification ID")
    title: str = Field(..., description="Short title")
    message: str = Field(..., description="Message body")
    type: NotificationType = Field(..., description="Notification category")
    is_read: bool = Field(..., description="Whether the recipient has read it")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")

    class Config:
        from_attributes = True
