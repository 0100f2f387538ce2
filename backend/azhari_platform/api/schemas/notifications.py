"""
Pydantic schemas for the notifications API.

Request and response models for notification endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    """Response model for a single notification."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique notification identifier")
    user_id: Optional[str] = Field(None, description="Recipient; null for a broadcast")
    title: str = Field(..., description="Notification title")
    message: str = Field(..., description="Notification body message")
    is_read: bool = Field(..., description="Whether the recipient has read it")
    created_at: datetime = Field(..., description="When notification was created")


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int = Field(..., description="Count of unread notifications")


class UnreadCountResponse(BaseModel):
    count: int = Field(..., description="Number of unread notifications")


class MarkReadResponse(BaseModel):
    success: bool


class BroadcastRequest(BaseModel):
    """Admin notification; omit user_id to broadcast to everyone."""

    title: str
    message: str
    user_id: Optional[str] = None
