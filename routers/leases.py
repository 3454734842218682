# routers/leases.py
"""
Lease API routes.

Create, sign, activate and terminate leases; attach documents; list the
payment schedule. Callers identify tenants and agents by id.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from azure_blob import upload_to_blob
from config import get_settings
from database import get_session
from schemas.lease import (
     LeaseCreate,
     LeaseCreatedResponse,
     LeaseResponse,
     LeaseStatusUpdate,
     SignLeaseRequest,
     TerminateLeaseRequest,
)
from schemas.payment import RentPaymentResponse
from services.lease_service import LeaseService
from services.notification_service import NotificationDispatcher
from services.payment_service import get_lease_payments

router = APIRouter(prefix="/api/leases", tags=["leases"])


@router.post(
     "",
     response_model=LeaseCreatedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a lease agreement"
)
def create_lease(body: LeaseCreate, db: Session = Depends(get_session)):
     """
     Create a lease in **draft** status and schedule its rent payments.

     - **start_date** / **end_date**: Lease period (end not before start)
     - **monthly_rent**: Rent per payment
     - **terms.rent_due_date**: Day of month rent is due (clamped to short months)
     """
     lease_id = LeaseService.create_lease(db, body, NotificationDispatcher(db))
     payments = get_lease_payments(db, lease_id)
     db.commit()
     return LeaseCreatedResponse(id=lease_id, payments_scheduled=len(payments))


@router.get("", response_model=List[LeaseResponse], summary="List leases of a tenant or agent")
def list_leases(
     tenant_id: Optional[str] = Query(None, description="Leases where this user is the tenant"),
     agent_id: Optional[str] = Query(None, description="Leases managed by this agent"),
     db: Session = Depends(get_session)
):
     if tenant_id:
          return LeaseService.get_tenant_leases(db, tenant_id)
     if agent_id:
          return LeaseService.get_agent_leases(db, agent_id)
     raise HTTPException(
          status_code=status.HTTP_400_BAD_REQUEST,
          detail="tenant_id or agent_id is required"
     )


@router.get("/{lease_id}", response_model=LeaseResponse, summary="Get a lease")
def get_lease(lease_id: str, db: Session = Depends(get_session)):
     return LeaseService.get_lease(db, lease_id)


@router.post("/{lease_id}/sign", response_model=LeaseResponse, summary="Sign a lease")
def sign_lease(lease_id: str, body: SignLeaseRequest, request: Request, db: Session = Depends(get_session)):
     """
     Record the signature of one party. Once tenant and agent have both
     signed the lease becomes **active**.
     """
     ip_address = body.ip_address or (request.client.host if request.client else "unknown")
     lease = LeaseService.sign_lease(
          db,
          lease_id,
          party=body.party,
          signature_data=body.signature_data,
          ip_address=ip_address,
          notifier=NotificationDispatcher(db),
     )
     db.commit()
     return lease


@router.patch("/{lease_id}/status", response_model=LeaseResponse, summary="Update lease status")
def update_lease_status(lease_id: str, body: LeaseStatusUpdate, db: Session = Depends(get_session)):
     lease = LeaseService.update_lease_status(db, lease_id, body.status, notifier=NotificationDispatcher(db))
     db.commit()
     return lease


@router.post("/{lease_id}/terminate", response_model=LeaseResponse, summary="Terminate a lease")
def terminate_lease(lease_id: str, body: TerminateLeaseRequest, db: Session = Depends(get_session)):
     """
     Terminate the lease: future pending payments are cancelled and the
     agent is reminded to return the security deposit.
     """
     lease = LeaseService.terminate_lease(db, lease_id, reason=body.reason, notifier=NotificationDispatcher(db))
     db.commit()
     return lease


@router.post(
     "/{lease_id}/documents",
     status_code=status.HTTP_201_CREATED,
     summary="Upload a lease document"
)
def upload_lease_document(
     lease_id: str,
     document: UploadFile = File(...),
     doc_type: Literal["lease_agreement", "addendum", "inspection_report", "other"] = Form("other"),
     db: Session = Depends(get_session)
):
     """Store the file in blob storage and attach it to the lease."""
     LeaseService.get_lease(db, lease_id)
     url = upload_to_blob(document, get_settings().storage.documents_container, prefix=lease_id)
     record = LeaseService.attach_document(db, lease_id, doc_type, document.filename or "document", url)
     db.commit()
     return record


@router.get("/{lease_id}/payments", response_model=List[RentPaymentResponse], summary="Lease payment schedule")
def list_lease_payments(lease_id: str, db: Session = Depends(get_session)):
     LeaseService.get_lease(db, lease_id)
     return get_lease_payments(db, lease_id)
