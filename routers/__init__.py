# routers/__init__.py
from .leases import router as leases_router
from .payments import router as payments_router
from .maintenance import router as maintenance_router
from .renewals import router as renewals_router
from .notifications import router as notifications_router

__all__ = [
     "leases_router",
     "payments_router",
     "maintenance_router",
     "renewals_router",
     "notifications_router",
]
