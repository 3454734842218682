# models/__init__.py
from .base import Base
from .lease import LeaseAgreement, LeaseStatus, LeaseType
from .rent_payment import RentPayment, RentPaymentStatus, RentPaymentTransaction
from .maintenance_request import (
     MaintenanceRequest,
     MaintenanceCategory,
     MaintenancePriority,
     MaintenanceStatus,
)
from .lease_renewal_offer import LeaseRenewalOffer, RenewalOfferStatus
from .notification import Notification, NotificationPreference
from .job_run import JobRun

__all__ = [
     "Base",
     "LeaseAgreement",
     "LeaseStatus",
     "LeaseType",
     "RentPayment",
     "RentPaymentStatus",
     "RentPaymentTransaction",
     "MaintenanceRequest",
     "MaintenanceCategory",
     "MaintenancePriority",
     "MaintenanceStatus",
     "LeaseRenewalOffer",
     "RenewalOfferStatus",
     "Notification",
     "NotificationPreference",
     "JobRun",
]
