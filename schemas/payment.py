"""
Pydantic schemas for rent payments.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from models.rent_payment import RentPaymentStatus


class RentPaymentResponse(BaseModel):
     """Schema for a scheduled rent payment."""
     id: str
     lease_id: str
     tenant_id: str
     amount: Decimal
     amount_paid: Decimal
     late_fee: Optional[Decimal] = None
     due_date: date
     paid_date: Optional[datetime] = None
     status: RentPaymentStatus
     payment_method: Optional[str] = None
     transaction_id: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class PaymentSubmitRequest(BaseModel):
     """Request body for POST /api/payments/{payment_id}/pay."""

     amount: Decimal = Field(..., gt=0, description="Amount paid")
     payment_method: str = Field(..., min_length=1, max_length=50, description="e.g. mpesa, card, bank_transfer")
     transaction_id: str = Field(
          ...,
          min_length=1,
          max_length=255,
          description="External payment provider reference",
     )

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": 85000,
                    "payment_method": "mpesa",
                    "transaction_id": "QJK3L2X9PA",
               }
          }
     )


class PaymentResult(BaseModel):
     """Response for POST /api/payments/{payment_id}/pay."""

     payment_id: str
     status: RentPaymentStatus
     amount_paid: Decimal
     balance: Decimal = Field(..., description="Amount still owed on this payment")
     already_applied: bool = Field(False, description="True when the transaction id was seen before")
