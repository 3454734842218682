"""
Notification Service - in-app notifications with e-mail forwarding.

Every notification that passes the user's preferences is stored in the
notifications table. High and urgent ones are also e-mailed when the user
has an address on file and e-mail delivery is configured. E-mails wait in
a per-session outbox and go out only after the session commits, so a
rolled-back request or savepoint sends nothing. E-mail failures are
logged; the stored notification stands.
"""
import logging
from datetime import datetime
from decimal import Decimal
from functools import partial
from typing import Any, Callable, List, Optional

import requests
from pydantic import TypeAdapter
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from config import get_settings
from exceptions import EntityNotFoundError, LeaseKeeperError
from models import Notification, NotificationPreference
from schemas.notification import NotificationPreferences
from utils.email import send_notification_email

logger = logging.getLogger(__name__)

EMAIL_PRIORITIES = ("high", "urgent")

# Notification type -> preference switch
TYPE_PREFERENCE_KEYS = {
     "booking": "bookings",
     "payment": "payments",
     "reminder": "payments",
     "message": "messages",
     "property": "property_updates",
     "system": "system_alerts",
}

OUTBOX_KEY = "notification_outbox"

_json_data = TypeAdapter(Any)


def _outbox(db: Session) -> list:
     """E-mails queued on this session, delivered by the commit hook."""
     if OUTBOX_KEY not in db.info:
          db.info[OUTBOX_KEY] = []
          event.listen(db, "after_commit", _deliver_outbox)
          event.listen(db, "after_rollback", _discard_outbox)
     return db.info[OUTBOX_KEY]


def _deliver_outbox(session: Session) -> None:
     # Also fires when a savepoint is released
     if session.in_nested_transaction():
          return
     queued, session.info[OUTBOX_KEY] = session.info[OUTBOX_KEY], []
     for notification, deliver in queued:
          # Rows added inside a rolled-back savepoint are no longer persistent
          if inspect(notification).persistent:
               deliver()


def _discard_outbox(session: Session) -> None:
     if not session.in_nested_transaction():
          session.info[OUTBOX_KEY] = []


def format_amount(amount) -> str:
     """85000 -> '85,000'; 85000.5 -> '85,000.50'"""
     value = Decimal(str(amount))
     if value == value.to_integral_value():
          return f"{value:,.0f}"
     return f"{value:,.2f}"


PAYMENT_TEMPLATES = {
     "success": {
          "title": "Payment Successful",
          "message": "Your payment of KSh {amount} was processed successfully",
          "priority": "medium",
     },
     "failed": {
          "title": "Payment Failed",
          "message": "Your payment of KSh {amount} could not be processed",
          "priority": "high",
     },
     "reminder": {
          "title": "Payment Reminder",
          "message": "A balance of KSh {amount} remains on your rent payment",
          "priority": "medium",
     },
     "overdue": {
          "title": "Payment Overdue",
          "message": "Your rent payment of KSh {amount} is overdue",
          "priority": "urgent",
     },
}


class NotificationDispatcher:
     """
     Stores and delivers notifications for one database session.

     Args:
          db: SQLAlchemy session the notification rows are written to
          email_sender: callable(to_email, title, message, action_url)
          email_enabled: override for the BREVO_API_KEY check
          clock: returns the current local time (quiet hours)
     """

     def __init__(
          self,
          db: Session,
          email_sender: Optional[Callable] = None,
          email_enabled: Optional[bool] = None,
          clock: Callable[[], datetime] = datetime.now,
     ):
          self.db = db
          self.email_sender = email_sender or send_notification_email
          if email_enabled is None:
               email_enabled = get_settings().notifications.email_enabled
          self.email_enabled = email_enabled
          self.clock = clock

     def send_notification(
          self,
          user_id: str,
          type: str,
          title: str,
          message: str,
          priority: str = "medium",
          action_url: Optional[str] = None,
          data: Optional[dict] = None,
     ) -> Optional[Notification]:
          """
          Store a notification and forward it by e-mail when appropriate.

          Returns:
               The stored Notification, or None when the user's
               preferences suppressed it.
          """
          preferences = self.get_preferences(user_id)
          if not self._should_send(type, priority, preferences):
               logger.debug("Notification '%s' for user %s suppressed by preferences", title, user_id)
               return None

          notification = Notification(
               user_id=user_id,
               type=type,
               title=title,
               message=message,
               priority=priority,
               action_url=action_url,
               data=_json_data.dump_python(data, mode="json") if data is not None else None,
               read=False,
          )
          self.db.add(notification)
          self.db.flush()

          if priority in EMAIL_PRIORITIES and preferences.email_notifications and preferences.email:
               self._queue_email(preferences.email, notification)

          return notification

     def send_payment_notification(self, user_id: str, payment_data: dict, kind: str) -> Optional[Notification]:
          """
          Send one of the payment templates: success, failed, reminder, overdue.

          payment_data must carry `amount`; overdue notices also use
          `late_fee` and `days_overdue` when present.
          """
          template = PAYMENT_TEMPLATES[kind]
          message = template["message"].format(amount=format_amount(payment_data["amount"]))
          if kind == "overdue" and payment_data.get("days_overdue") is not None:
               message += f" by {payment_data['days_overdue']} days"
          if kind == "overdue" and payment_data.get("late_fee"):
               message += f". A late fee of KSh {format_amount(payment_data['late_fee'])} has been applied"

          return self.send_notification(
               user_id=user_id,
               type="payment",
               title=template["title"],
               message=message,
               priority=template["priority"],
               action_url="/payments",
               data=payment_data,
          )

     def get_preferences(self, user_id: str) -> NotificationPreferences:
          row = self.db.get(NotificationPreference, user_id)
          if row is None:
               return NotificationPreferences()
          return NotificationPreferences(
               email=row.email,
               email_notifications=row.email_notifications,
               notification_types=row.notification_types or {},
               quiet_hours=row.quiet_hours or {},
          )

     def update_preferences(self, user_id: str, preferences: NotificationPreferences) -> NotificationPreference:
          row = self.db.get(NotificationPreference, user_id)
          if row is None:
               row = NotificationPreference(user_id=user_id)
               self.db.add(row)
          row.email = preferences.email
          row.email_notifications = preferences.email_notifications
          row.notification_types = preferences.notification_types.model_dump()
          row.quiet_hours = preferences.quiet_hours.model_dump()
          self.db.flush()
          return row

     def get_notifications(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
          query = self.db.query(Notification).filter(Notification.user_id == user_id)
          if unread_only:
               query = query.filter(Notification.read.is_(False))
          return query.order_by(Notification.created_at.desc()).limit(limit).all()

     def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
          notification = (
               self.db.query(Notification)
               .filter(Notification.id == notification_id, Notification.user_id == user_id)
               .first()
          )
          if notification is None:
               raise EntityNotFoundError(f"Notification {notification_id} not found")
          notification.read = True
          self.db.flush()
          return notification

     def mark_all_as_read(self, user_id: str) -> int:
          count = (
               self.db.query(Notification)
               .filter(Notification.user_id == user_id, Notification.read.is_(False))
               .update({Notification.read: True}, synchronize_session="fetch")
          )
          self.db.flush()
          return count

     def _should_send(self, type: str, priority: str, preferences: NotificationPreferences) -> bool:
          key = TYPE_PREFERENCE_KEYS.get(type)
          if key and not getattr(preferences.notification_types, key):
               return False

          quiet = preferences.quiet_hours
          if quiet.enabled:
               current = self.clock().strftime("%H:%M")
               if quiet.start_time < quiet.end_time:
                    in_quiet_hours = quiet.start_time <= current <= quiet.end_time
               else:
                    # Overnight window, e.g. 22:00-08:00
                    in_quiet_hours = current >= quiet.start_time or current <= quiet.end_time
               if in_quiet_hours:
                    return priority == "urgent"

          return True

     def _queue_email(self, to_email: str, notification: Notification) -> None:
          if not self.email_enabled:
               logger.debug("E-mail delivery disabled, skipping '%s'", notification.title)
               return
          deliver = partial(
               self._send_email,
               to_email,
               notification.id,
               notification.user_id,
               notification.title,
               notification.message,
               notification.action_url,
          )
          _outbox(self.db).append((notification, deliver))

     def _send_email(
          self,
          to_email: str,
          notification_id: str,
          user_id: str,
          title: str,
          message: str,
          action_url: Optional[str],
     ) -> None:
          try:
               self.email_sender(to_email, title, message, action_url)
          except (LeaseKeeperError, requests.RequestException):
               logger.exception("Error e-mailing notification %s to user %s", notification_id, user_id)
