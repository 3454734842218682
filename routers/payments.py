# routers/payments.py
"""
Rent payment API.

POST /api/payments/{payment_id}/pay: apply money received from the payment
provider. Retrying with the same transaction_id is safe: the payment is
returned unchanged with already_applied=true.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from schemas.payment import PaymentResult, PaymentSubmitRequest, RentPaymentResponse
from services.notification_service import NotificationDispatcher
from services.payment_service import get_payment, get_upcoming_payments, process_rent_payment

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("/upcoming", response_model=List[RentPaymentResponse], summary="Open payments of a tenant")
def upcoming_payments(
     tenant_id: str = Query(..., description="Tenant id"),
     limit: int = Query(5, ge=1, le=50),
     db: Session = Depends(get_session)
):
     return get_upcoming_payments(db, tenant_id, limit=limit)


@router.get("/{payment_id}", response_model=RentPaymentResponse, summary="Get a rent payment")
def read_payment(payment_id: str, db: Session = Depends(get_session)):
     return get_payment(db, payment_id)


@router.post("/{payment_id}/pay", response_model=PaymentResult, summary="Submit a rent payment")
def pay_rent(payment_id: str, body: PaymentSubmitRequest, db: Session = Depends(get_session)):
     """
     Apply a payment.

     - Full amount (rent + any late fee): status **paid**
     - Less: status **partial**, and the tenant is reminded of the balance
     """
     payment, applied = process_rent_payment(
          db,
          payment_id,
          amount=body.amount,
          payment_method=body.payment_method,
          transaction_id=body.transaction_id,
          notifier=NotificationDispatcher(db),
     )
     db.commit()
     return PaymentResult(
          payment_id=payment.id,
          status=payment.status,
          amount_paid=payment.amount_paid,
          balance=payment.balance,
          already_applied=not applied,
     )
