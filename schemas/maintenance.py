"""
Pydantic schemas for maintenance requests.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from models.maintenance_request import MaintenanceCategory, MaintenancePriority, MaintenanceStatus


class ContractorInfo(BaseModel):
     name: str
     phone: str
     email: str


class MaintenanceRequestCreate(BaseModel):
     lease_id: str = Field(..., min_length=1)
     tenant_id: str = Field(..., min_length=1)
     agent_id: str = Field(..., min_length=1)
     title: str = Field(..., min_length=1, max_length=255)
     description: str = Field(..., min_length=1)
     category: MaintenanceCategory = MaintenanceCategory.OTHER
     priority: MaintenancePriority = MaintenancePriority.MEDIUM
     images: List[str] = Field(default_factory=list)


class MaintenanceStatusUpdate(BaseModel):
     status: MaintenanceStatus
     estimated_cost: Optional[Decimal] = Field(None, ge=0)
     actual_cost: Optional[Decimal] = Field(None, ge=0)
     scheduled_date: Optional[datetime] = None
     completed_date: Optional[datetime] = None
     contractor_info: Optional[ContractorInfo] = None


class MaintenanceRequestResponse(BaseModel):
     id: str
     lease_id: str
     tenant_id: str
     agent_id: str
     title: str
     description: str
     category: MaintenanceCategory
     priority: MaintenancePriority
     status: MaintenanceStatus
     images: List[str]
     estimated_cost: Optional[Decimal] = None
     actual_cost: Optional[Decimal] = None
     scheduled_date: Optional[datetime] = None
     completed_date: Optional[datetime] = None
     contractor_info: Optional[dict] = None
     created_at: datetime
     updated_at: datetime

     model_config = ConfigDict(from_attributes=True)
