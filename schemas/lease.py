"""
Pydantic schemas for lease agreement requests and responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models.lease import LeaseStatus, LeaseType


SigningParty = Literal["tenant", "agent", "landlord"]
DocumentType = Literal["lease_agreement", "addendum", "inspection_report", "other"]


class LeaseTerms(BaseModel):
     """Terms embedded in a lease (stored as JSON on the lease row)."""
     rent_due_date: int = Field(1, ge=1, le=31, description="Day of month rent is due (1-31)")
     late_fee_amount: Decimal = Field(Decimal("0"), ge=0, description="Flat late fee; 0 means 5% of rent")
     late_fee_grace_days: int = Field(3, ge=0, description="Days after due date before a payment is overdue")
     utilities_included: List[str] = Field(default_factory=list)
     maintenance_responsibility: Literal["tenant", "landlord", "shared"] = "landlord"
     pet_policy: Literal["allowed", "not_allowed", "with_deposit"] = "not_allowed"
     smoking_policy: Literal["allowed", "not_allowed"] = "not_allowed"
     subletting_allowed: bool = False
     early_termination_fee: Decimal = Field(Decimal("0"), ge=0)
     renewal_notice_days: int = Field(30, ge=0)


class LeaseDocument(BaseModel):
     type: DocumentType = "other"
     url: str
     name: str
     uploaded_at: datetime


class SignatureRecord(BaseModel):
     party: SigningParty
     signed_at: datetime
     signature_data: str
     ip_address: str


class LeaseCreate(BaseModel):
     """Schema for creating a new lease agreement."""
     property_id: str = Field(..., min_length=1)
     tenant_id: str = Field(..., min_length=1)
     agent_id: str = Field(..., min_length=1)
     lease_type: LeaseType = LeaseType.FIXED
     start_date: date
     end_date: date
     monthly_rent: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     security_deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     terms: LeaseTerms = Field(default_factory=LeaseTerms)
     documents: List[LeaseDocument] = Field(default_factory=list)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": "prop-001",
                    "tenant_id": "tenant-001",
                    "agent_id": "agent-001",
                    "lease_type": "fixed",
                    "start_date": "2024-01-01",
                    "end_date": "2024-12-31",
                    "monthly_rent": 85000,
                    "security_deposit": 85000,
                    "terms": {"rent_due_date": 1, "late_fee_grace_days": 3}
               }
          }
     )

     @model_validator(mode="after")
     def _check_dates(self):
          if self.end_date < self.start_date:
               raise ValueError("end_date must not be before start_date")
          return self


class LeaseResponse(BaseModel):
     """Schema for lease response."""
     id: str
     property_id: str
     tenant_id: str
     agent_id: str
     lease_type: LeaseType
     start_date: date
     end_date: date
     monthly_rent: Decimal
     security_deposit: Decimal
     status: LeaseStatus
     terms: dict
     documents: List[dict]
     signatures: List[dict]
     termination_date: Optional[datetime] = None
     termination_reason: Optional[str] = None
     created_at: datetime
     updated_at: datetime

     model_config = ConfigDict(from_attributes=True)


class LeaseCreatedResponse(BaseModel):
     id: str
     payments_scheduled: int


class SignLeaseRequest(BaseModel):
     party: SigningParty
     signature_data: str = Field(..., min_length=1)
     ip_address: Optional[str] = Field(None, description="Defaults to the client address")


class LeaseStatusUpdate(BaseModel):
     status: LeaseStatus


class TerminateLeaseRequest(BaseModel):
     reason: Optional[str] = Field(None, max_length=1000)
