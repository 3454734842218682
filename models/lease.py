# models/lease.py
import enum
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, JSON, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, generate_uuid


class LeaseType(str, enum.Enum):
     FIXED = "fixed"
     PERIODIC = "periodic"
     MONTH_TO_MONTH = "month_to_month"


class LeaseStatus(str, enum.Enum):
     """Lifecycle: draft -> pending_signature -> active -> terminated/expired."""
     DRAFT = "draft"
     PENDING_SIGNATURE = "pending_signature"
     ACTIVE = "active"
     TERMINATED = "terminated"
     EXPIRED = "expired"


TERMINAL_LEASE_STATUSES = frozenset({LeaseStatus.TERMINATED, LeaseStatus.EXPIRED})

# Both must sign before a lease becomes active; a landlord signature is optional.
REQUIRED_SIGNING_PARTIES = ("tenant", "agent")
SIGNING_PARTIES = ("tenant", "agent", "landlord")

DEFAULT_GRACE_DAYS = 3
DEFAULT_RENEWAL_NOTICE_DAYS = 30


class LeaseAgreement(Base):
     """
     LeaseAgreement model - tenancy contract between a tenant, an agent
     and a property.

     `terms`, `documents` and `signatures` are JSON documents; see
     schemas.lease for their shape. `version` is the optimistic
     concurrency counter maintained by SQLAlchemy.
     """
     __tablename__ = "lease_agreements"

     id = Column(String(36), primary_key=True, default=generate_uuid)
     property_id = Column(String(36), nullable=False, index=True)
     tenant_id = Column(String(36), nullable=False, index=True)
     agent_id = Column(String(36), nullable=False, index=True)

     lease_type = Column(
          Enum(LeaseType, name="lease_type", values_callable=lambda e: [m.value for m in e]),
          default=LeaseType.FIXED,
          nullable=False
     )

     # Lease period
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=False, index=True)

     # Pricing
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     security_deposit = Column(Numeric(12, 2), nullable=False, default=0)

     status = Column(
          Enum(LeaseStatus, name="lease_status", values_callable=lambda e: [m.value for m in e]),
          default=LeaseStatus.DRAFT,
          nullable=False,
          index=True
     )

     terms = Column(JSON, nullable=False, default=dict)
     documents = Column(JSON, nullable=False, default=list)
     signatures = Column(JSON, nullable=False, default=list)

     # Termination
     termination_date = Column(DateTime, nullable=True)
     termination_reason = Column(Text, nullable=True)

     version = Column(Integer, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     payments = relationship(
          "RentPayment",
          back_populates="lease",
          order_by="RentPayment.due_date",
          cascade="all, delete-orphan"
     )
     maintenance_requests = relationship("MaintenanceRequest", back_populates="lease")
     renewal_offers = relationship("LeaseRenewalOffer", back_populates="original_lease")

     __mapper_args__ = {"version_id_col": version}

     def __repr__(self):
          return f"<LeaseAgreement(id={self.id}, tenant_id={self.tenant_id}, status='{self.status.value}')>"

     @property
     def signed_parties(self) -> set:
          return {s.get("party") for s in (self.signatures or [])}

     @property
     def is_fully_signed(self) -> bool:
          """True once every required party has a signature record."""
          signed = self.signed_parties
          return all(party in signed for party in REQUIRED_SIGNING_PARTIES)

     @property
     def grace_days(self) -> int:
          """Late fee grace period in days (3 when not configured)."""
          value = (self.terms or {}).get("late_fee_grace_days")
          return DEFAULT_GRACE_DAYS if value is None else int(value)

     @property
     def renewal_notice_days(self) -> int:
          """Days before the end date that a renewal offer goes out (30 when not configured)."""
          value = (self.terms or {}).get("renewal_notice_days")
          return DEFAULT_RENEWAL_NOTICE_DAYS if value is None else int(value)

     @property
     def rent_due_day(self) -> int:
          return int((self.terms or {}).get("rent_due_date") or 1)

     @property
     def late_fee_amount(self) -> Decimal:
          """Configured flat late fee; zero means the percentage default applies."""
          return Decimal(str((self.terms or {}).get("late_fee_amount") or 0))
