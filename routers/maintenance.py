# routers/maintenance.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from models.maintenance_request import MaintenanceStatus
from schemas.maintenance import MaintenanceRequestCreate, MaintenanceRequestResponse, MaintenanceStatusUpdate
from services import maintenance_service
from services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/api/maintenance-requests", tags=["maintenance"])


@router.post(
     "",
     response_model=MaintenanceRequestResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Submit a maintenance request"
)
def submit_maintenance_request(body: MaintenanceRequestCreate, db: Session = Depends(get_session)):
     """
     Submit a request against a lease. The agent is notified; emergency
     requests are acknowledged immediately.
     """
     request = maintenance_service.create_maintenance_request(db, body, NotificationDispatcher(db))
     db.commit()
     return request


@router.get("", response_model=List[MaintenanceRequestResponse], summary="List maintenance requests")
def list_maintenance_requests(
     lease_id: Optional[str] = Query(None),
     tenant_id: Optional[str] = Query(None),
     agent_id: Optional[str] = Query(None),
     status: Optional[MaintenanceStatus] = Query(None, description="Filter by status"),
     limit: int = Query(20, ge=1, le=100),
     db: Session = Depends(get_session)
):
     return maintenance_service.get_maintenance_requests(
          db,
          lease_id=lease_id,
          tenant_id=tenant_id,
          agent_id=agent_id,
          status=status,
          limit=limit,
     )


@router.get("/{request_id}", response_model=MaintenanceRequestResponse, summary="Get a maintenance request")
def get_maintenance_request(request_id: str, db: Session = Depends(get_session)):
     return maintenance_service.get_maintenance_request(db, request_id)


@router.patch("/{request_id}/status", response_model=MaintenanceRequestResponse, summary="Update request status")
def update_maintenance_status(request_id: str, body: MaintenanceStatusUpdate, db: Session = Depends(get_session)):
     updates = body.model_dump(exclude={"status"}, exclude_none=True)
     request = maintenance_service.update_maintenance_status(
          db,
          request_id,
          body.status,
          notifier=NotificationDispatcher(db),
          **updates,
     )
     db.commit()
     return request
