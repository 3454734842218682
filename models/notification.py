# models/notification.py
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, func
from .base import Base, generate_uuid


class Notification(Base):
     """
     Notification model - in-app notification for a user.

     type: booking, payment, message, property, system, reminder
     priority: low, medium, high, urgent
     """
     __tablename__ = "notifications"

     id = Column(String(36), primary_key=True, default=generate_uuid)
     user_id = Column(String(36), nullable=False, index=True)
     type = Column(String(20), nullable=False)
     title = Column(String(255), nullable=False)
     message = Column(Text, nullable=False)
     priority = Column(String(10), nullable=False, default="medium")
     action_url = Column(String(500), nullable=True)
     data = Column(JSON, nullable=True)
     read = Column(Boolean, nullable=False, default=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<Notification(id={self.id}, user_id={self.user_id}, title='{self.title}')>"


class NotificationPreference(Base):
     """
     NotificationPreference model - per-user delivery settings.
     Users without a row get the defaults of schemas.NotificationPreferences.
     """
     __tablename__ = "notification_preferences"

     user_id = Column(String(36), primary_key=True)
     email = Column(String(255), nullable=True)
     email_notifications = Column(Boolean, nullable=False, default=True)
     notification_types = Column(JSON, nullable=False, default=dict)
     quiet_hours = Column(JSON, nullable=False, default=dict)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<NotificationPreference(user_id={self.user_id}, email_notifications={self.email_notifications})>"
