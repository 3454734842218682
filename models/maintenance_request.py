# models/maintenance_request.py
import enum
from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey, JSON, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, generate_uuid


class MaintenanceCategory(str, enum.Enum):
     PLUMBING = "plumbing"
     ELECTRICAL = "electrical"
     HVAC = "hvac"
     APPLIANCE = "appliance"
     STRUCTURAL = "structural"
     OTHER = "other"


class MaintenancePriority(str, enum.Enum):
     LOW = "low"
     MEDIUM = "medium"
     HIGH = "high"
     EMERGENCY = "emergency"


class MaintenanceStatus(str, enum.Enum):
     """submitted -> acknowledged -> in_progress -> completed/cancelled"""
     SUBMITTED = "submitted"
     ACKNOWLEDGED = "acknowledged"
     IN_PROGRESS = "in_progress"
     COMPLETED = "completed"
     CANCELLED = "cancelled"


class MaintenanceRequest(Base):
     """
     MaintenanceRequest model - tenant-submitted issue tied to a lease.
     """
     __tablename__ = "maintenance_requests"

     id = Column(String(36), primary_key=True, default=generate_uuid)
     lease_id = Column(
          String(36),
          ForeignKey("lease_agreements.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     tenant_id = Column(String(36), nullable=False, index=True)
     agent_id = Column(String(36), nullable=False, index=True)

     title = Column(String(255), nullable=False)
     description = Column(Text, nullable=False)
     category = Column(
          Enum(MaintenanceCategory, name="maintenance_category", values_callable=lambda e: [m.value for m in e]),
          default=MaintenanceCategory.OTHER,
          nullable=False
     )
     priority = Column(
          Enum(MaintenancePriority, name="maintenance_priority", values_callable=lambda e: [m.value for m in e]),
          default=MaintenancePriority.MEDIUM,
          nullable=False,
          index=True
     )
     status = Column(
          Enum(MaintenanceStatus, name="maintenance_status", values_callable=lambda e: [m.value for m in e]),
          default=MaintenanceStatus.SUBMITTED,
          nullable=False,
          index=True
     )
     images = Column(JSON, nullable=False, default=list)

     # Costs and scheduling
     estimated_cost = Column(Numeric(12, 2), nullable=True)
     actual_cost = Column(Numeric(12, 2), nullable=True)
     scheduled_date = Column(DateTime, nullable=True)
     completed_date = Column(DateTime, nullable=True)
     contractor_info = Column(JSON, nullable=True)  # {name, phone, email}

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     lease = relationship("LeaseAgreement", back_populates="maintenance_requests")

     def __repr__(self):
          return f"<MaintenanceRequest(id={self.id}, priority='{self.priority.value}', status='{self.status.value}')>"
