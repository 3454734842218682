"""
Maintenance Service - tenant maintenance requests.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import EntityNotFoundError, InvalidEntityStateError
from models import LeaseAgreement, MaintenanceRequest
from models.maintenance_request import MaintenancePriority, MaintenanceStatus
from schemas.maintenance import MaintenanceRequestCreate
from services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED)
ESCALATION_PRIORITIES = (MaintenancePriority.HIGH, MaintenancePriority.EMERGENCY)

# High/emergency requests still unacknowledged after this long are escalated
ESCALATION_AFTER = timedelta(hours=24)

UPDATABLE_FIELDS = ("estimated_cost", "actual_cost", "scheduled_date", "completed_date", "contractor_info")


def get_maintenance_request(db: Session, request_id: str) -> MaintenanceRequest:
     request = db.get(MaintenanceRequest, request_id)
     if request is None:
          raise EntityNotFoundError(f"Maintenance request {request_id} not found")
     return request


def create_maintenance_request(
     db: Session,
     data: MaintenanceRequestCreate,
     notifier: Optional[NotificationDispatcher] = None,
) -> MaintenanceRequest:
     """
     Store a new request and notify the agent.

     Emergency requests are auto-assigned straight away.

     Raises:
          EntityNotFoundError: If the lease doesn't exist
     """
     if db.get(LeaseAgreement, data.lease_id) is None:
          raise EntityNotFoundError(f"Lease {data.lease_id} not found")

     notifier = notifier or NotificationDispatcher(db)

     request = MaintenanceRequest(
          lease_id=data.lease_id,
          tenant_id=data.tenant_id,
          agent_id=data.agent_id,
          title=data.title,
          description=data.description,
          category=data.category,
          priority=data.priority,
          status=MaintenanceStatus.SUBMITTED,
          images=list(data.images),
     )
     db.add(request)
     db.flush()

     notifier.send_notification(
          user_id=request.agent_id,
          type="system",
          title="New Maintenance Request",
          message=f"{request.title} - Priority: {request.priority.value}",
          priority="urgent" if request.priority == MaintenancePriority.EMERGENCY else "medium",
          action_url=f"/maintenance/{request.id}",
     )

     if request.priority == MaintenancePriority.EMERGENCY:
          auto_assign_emergency_maintenance(db, request)

     return request


def auto_assign_emergency_maintenance(db: Session, request: MaintenanceRequest) -> None:
     # No contractor directory yet: acknowledge so the request leaves the triage queue
     logger.warning("Auto-assigning emergency maintenance %s", request.id)
     request.status = MaintenanceStatus.ACKNOWLEDGED
     db.flush()


def update_maintenance_status(
     db: Session,
     request_id: str,
     status: MaintenanceStatus,
     notifier: Optional[NotificationDispatcher] = None,
     now: Optional[datetime] = None,
     **updates,
) -> MaintenanceRequest:
     """
     Change a request's status, optionally with cost/schedule/contractor fields.

     Raises:
          InvalidEntityStateError: If the request is completed or cancelled
     """
     request = get_maintenance_request(db, request_id)
     if request.status in CLOSED_STATUSES:
          raise InvalidEntityStateError(f"Maintenance request {request_id} is {request.status.value}")

     unknown = set(updates) - set(UPDATABLE_FIELDS)
     if unknown:
          raise TypeError(f"Unexpected maintenance fields: {', '.join(sorted(unknown))}")

     notifier = notifier or NotificationDispatcher(db)

     request.status = status
     for field, value in updates.items():
          if value is not None:
               setattr(request, field, value)
     if status == MaintenanceStatus.COMPLETED and request.completed_date is None:
          request.completed_date = now or datetime.now()
     db.flush()

     notifier.send_notification(
          user_id=request.tenant_id,
          type="system",
          title="Maintenance Request Updated",
          message=f"{request.title} is now {status.value.replace('_', ' ')}",
          priority="medium",
          action_url=f"/maintenance/{request.id}",
     )
     return request


def get_maintenance_requests(
     db: Session,
     lease_id: Optional[str] = None,
     tenant_id: Optional[str] = None,
     agent_id: Optional[str] = None,
     status: Optional[MaintenanceStatus] = None,
     limit: int = 20,
) -> List[MaintenanceRequest]:
     query = db.query(MaintenanceRequest)

     if lease_id:
          query = query.filter(MaintenanceRequest.lease_id == lease_id)
     if tenant_id:
          query = query.filter(MaintenanceRequest.tenant_id == tenant_id)
     if agent_id:
          query = query.filter(MaintenanceRequest.agent_id == agent_id)
     if status:
          query = query.filter(MaintenanceRequest.status == status)

     return query.order_by(MaintenanceRequest.created_at.desc()).limit(limit).all()


def check_maintenance_escalation(
     db: Session,
     notifier: Optional[NotificationDispatcher] = None,
     now: Optional[datetime] = None,
) -> int:
     """
     Remind agents of high/emergency requests nobody has acknowledged.

     Runs every 4 hours. Returns the number of requests escalated.
     """
     now = now or datetime.now()
     notifier = notifier or NotificationDispatcher(db)

     stale = (
          db.query(MaintenanceRequest)
          .filter(
               MaintenanceRequest.status == MaintenanceStatus.SUBMITTED,
               MaintenanceRequest.priority.in_(ESCALATION_PRIORITIES),
               MaintenanceRequest.created_at < now - ESCALATION_AFTER
          )
          .all()
     )

     escalated = 0
     for request in stale:
          try:
               with db.begin_nested():
                    notifier.send_notification(
                         user_id=request.agent_id,
                         type="system",
                         title="Maintenance Request Waiting",
                         message=f"{request.title} ({request.priority.value}) has not been acknowledged",
                         priority="urgent",
                         action_url=f"/maintenance/{request.id}",
                    )
          except Exception:
               logger.exception("Error escalating maintenance request %s", request.id)
               continue
          escalated += 1

     logger.info("Maintenance escalation: %d requests escalated", escalated)
     return escalated
