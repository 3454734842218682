from .lease import (
     LeaseTerms,
     LeaseCreate,
     LeaseResponse,
     LeaseCreatedResponse,
     SignLeaseRequest,
     LeaseStatusUpdate,
     TerminateLeaseRequest,
)
from .payment import RentPaymentResponse, PaymentSubmitRequest, PaymentResult
from .maintenance import MaintenanceRequestCreate, MaintenanceStatusUpdate, MaintenanceRequestResponse
from .renewal import RenewalOfferResponse, RenewalOfferDecision
from .notification import NotificationResponse, NotificationPreferences

__all__ = [
     "LeaseTerms",
     "LeaseCreate",
     "LeaseResponse",
     "LeaseCreatedResponse",
     "SignLeaseRequest",
     "LeaseStatusUpdate",
     "TerminateLeaseRequest",
     "RentPaymentResponse",
     "PaymentSubmitRequest",
     "PaymentResult",
     "MaintenanceRequestCreate",
     "MaintenanceStatusUpdate",
     "MaintenanceRequestResponse",
     "RenewalOfferResponse",
     "RenewalOfferDecision",
     "NotificationResponse",
     "NotificationPreferences",
]
