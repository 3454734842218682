# models/lease_renewal_offer.py
import enum
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, generate_uuid


class RenewalOfferStatus(str, enum.Enum):
     PENDING_TENANT_RESPONSE = "pending_tenant_response"
     ACCEPTED = "accepted"
     DECLINED = "declined"
     EXPIRED = "expired"


class LeaseRenewalOffer(Base):
     """
     LeaseRenewalOffer model - proposed extension of an expiring lease.
     Created by the renewal sweep roughly 30 days before the lease ends.
     """
     __tablename__ = "lease_renewal_offers"

     id = Column(String(36), primary_key=True, default=generate_uuid)
     original_lease_id = Column(
          String(36),
          ForeignKey("lease_agreements.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     tenant_id = Column(String(36), nullable=False)
     agent_id = Column(String(36), nullable=False)
     property_id = Column(String(36), nullable=False)

     proposed_start_date = Column(Date, nullable=False)
     proposed_end_date = Column(Date, nullable=False)
     proposed_rent = Column(Numeric(12, 2), nullable=False)

     status = Column(
          Enum(RenewalOfferStatus, name="renewal_offer_status", values_callable=lambda e: [m.value for m in e]),
          default=RenewalOfferStatus.PENDING_TENANT_RESPONSE,
          nullable=False,
          index=True
     )
     expires_at = Column(DateTime, nullable=False)
     responded_at = Column(DateTime, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     original_lease = relationship("LeaseAgreement", back_populates="renewal_offers")

     def __repr__(self):
          return f"<LeaseRenewalOffer(id={self.id}, lease={self.original_lease_id}, rent={self.proposed_rent})>"
