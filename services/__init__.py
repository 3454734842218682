# services/__init__.py
from .lease_service import LeaseService
from .notification_service import NotificationDispatcher
from .payment_schedule import build_due_dates, generate_payment_schedule
from .payment_service import (
     process_rent_payment,
     check_overdue_payments,
     cancel_future_payments,
     get_upcoming_payments,
)
from .renewal_service import check_lease_renewals, initiate_renewal_process, respond_to_renewal_offer
from .maintenance_service import (
     create_maintenance_request,
     update_maintenance_status,
     get_maintenance_requests,
     check_maintenance_escalation,
)

__all__ = [
     "LeaseService",
     "NotificationDispatcher",
     "build_due_dates",
     "generate_payment_schedule",
     "process_rent_payment",
     "check_overdue_payments",
     "cancel_future_payments",
     "get_upcoming_payments",
     "check_lease_renewals",
     "initiate_renewal_process",
     "respond_to_renewal_offer",
     "create_maintenance_request",
     "update_maintenance_status",
     "get_maintenance_requests",
     "check_maintenance_escalation",
]
