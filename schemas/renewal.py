from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict

from models.lease_renewal_offer import RenewalOfferStatus


class RenewalOfferResponse(BaseModel):
     id: str
     original_lease_id: str
     tenant_id: str
     agent_id: str
     property_id: str
     proposed_start_date: date
     proposed_end_date: date
     proposed_rent: Decimal
     status: RenewalOfferStatus
     expires_at: datetime
     responded_at: Optional[datetime] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class RenewalOfferDecision(BaseModel):
     accept: bool
