"""
Pydantic schemas for notifications and delivery preferences.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


NotificationType = Literal["booking", "payment", "message", "property", "system", "reminder"]
NotificationPriority = Literal["low", "medium", "high", "urgent"]


class NotificationResponse(BaseModel):
     id: str
     user_id: str
     type: NotificationType
     title: str
     message: str
     priority: NotificationPriority
     action_url: Optional[str] = None
     data: Optional[dict] = None
     read: bool
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class NotificationTypes(BaseModel):
     bookings: bool = True
     payments: bool = True
     messages: bool = True
     property_updates: bool = True
     system_alerts: bool = True
     marketing: bool = False


class QuietHours(BaseModel):
     enabled: bool = False
     start_time: str = Field("22:00", pattern=r"^\d{2}:\d{2}$")
     end_time: str = Field("08:00", pattern=r"^\d{2}:\d{2}$")


class NotificationPreferences(BaseModel):
     """Per-user delivery preferences; defaults apply when none are stored."""
     email: Optional[str] = Field(None, description="Address used for e-mail delivery")
     email_notifications: bool = True
     notification_types: NotificationTypes = Field(default_factory=NotificationTypes)
     quiet_hours: QuietHours = Field(default_factory=QuietHours)

     model_config = ConfigDict(from_attributes=True)
