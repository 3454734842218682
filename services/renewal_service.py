"""
Renewal Service - renewal offers for leases nearing their end date.

check_lease_renewals() is the daily sweep: every active lease ending
within its renewal notice period (the lease term `renewal_notice_days`,
30 days by default) gets one offer for a 12-month extension at 3% more
rent. A lease gets one offer per term: once an offer exists,
whatever the tenant answered, later sweeps skip the lease.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import EntityNotFoundError, InvalidEntityStateError
from models import LeaseAgreement, LeaseRenewalOffer
from models.lease import LeaseStatus
from models.lease_renewal_offer import RenewalOfferStatus
from services.notification_service import NotificationDispatcher
from services.payment_schedule import add_months

logger = logging.getLogger(__name__)

RENEWAL_TERM_MONTHS = 12
RENEWAL_RENT_INCREASE = Decimal("1.03")
OFFER_EXPIRY_DAYS_BEFORE_END = 30


def calculate_new_end_date(current_end_date: date, months: int = RENEWAL_TERM_MONTHS) -> date:
     return add_months(current_end_date, months)


def calculate_renewal_rent(current_rent: Decimal) -> Decimal:
     """3% increase, rounded to a whole amount."""
     return (Decimal(current_rent) * RENEWAL_RENT_INCREASE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def calculate_offer_expiry(lease_end_date: date) -> datetime:
     return datetime.combine(lease_end_date - timedelta(days=OFFER_EXPIRY_DAYS_BEFORE_END), time.min)


def check_lease_renewals(
     db: Session,
     notifier: Optional[NotificationDispatcher] = None,
     today: Optional[date] = None,
) -> int:
     """
     Create renewal offers for active leases inside their renewal notice
     period (30 days unless the lease terms say otherwise).

     Returns:
          Number of offers created
     """
     today = today or date.today()
     notifier = notifier or NotificationDispatcher(db)
     active_leases = (
          db.query(LeaseAgreement)
          .filter(LeaseAgreement.status == LeaseStatus.ACTIVE)
          .order_by(LeaseAgreement.end_date)
          .all()
     )
     # Notice periods live in the JSON terms, so the window is applied per lease
     expiring_leases = [
          lease for lease in active_leases
          if lease.end_date <= today + timedelta(days=lease.renewal_notice_days)
     ]

     created = 0
     for lease in expiring_leases:
          try:
               with db.begin_nested():
                    offer = initiate_renewal_process(db, lease, notifier)
          except Exception:
               logger.exception("Error initiating renewal process for lease %s", lease.id)
               continue
          if offer is not None:
               created += 1

     logger.info("Renewal sweep for %s: %d offers for %d expiring leases", today, created, len(expiring_leases))
     return created


def initiate_renewal_process(
     db: Session,
     lease: LeaseAgreement,
     notifier: NotificationDispatcher,
) -> Optional[LeaseRenewalOffer]:
     """
     Create a renewal offer for one lease and notify tenant and agent.

     Returns:
          The new offer, or None when the lease already has an offer,
          answered or not
     """
     existing_offer = (
          db.query(LeaseRenewalOffer)
          .filter(LeaseRenewalOffer.original_lease_id == lease.id)
          .first()
     )
     if existing_offer is not None:
          logger.debug(
               "Lease %s already has renewal offer %s (%s)",
               lease.id, existing_offer.id, existing_offer.status.value
          )
          return None

     offer = LeaseRenewalOffer(
          original_lease_id=lease.id,
          tenant_id=lease.tenant_id,
          agent_id=lease.agent_id,
          property_id=lease.property_id,
          proposed_start_date=lease.end_date,
          proposed_end_date=calculate_new_end_date(lease.end_date),
          proposed_rent=calculate_renewal_rent(lease.monthly_rent),
          status=RenewalOfferStatus.PENDING_TENANT_RESPONSE,
          expires_at=calculate_offer_expiry(lease.end_date),
     )
     db.add(offer)
     db.flush()

     notifier.send_notification(
          user_id=lease.tenant_id,
          type="system",
          title="Lease Renewal Offer",
          message="Your lease is expiring soon. We've prepared a renewal offer for you.",
          priority="high",
          action_url=f"/lease/{lease.id}/renewal",
     )
     notifier.send_notification(
          user_id=lease.agent_id,
          type="system",
          title="Lease Renewal Initiated",
          message=f"Renewal process started for lease {lease.id}",
          priority="medium",
          action_url=f"/agent/leases/{lease.id}",
     )

     logger.info("Created renewal offer %s for lease %s", offer.id, lease.id)
     return offer


def get_renewal_offers(db: Session, lease_id: str) -> List[LeaseRenewalOffer]:
     return (
          db.query(LeaseRenewalOffer)
          .filter(LeaseRenewalOffer.original_lease_id == lease_id)
          .order_by(LeaseRenewalOffer.created_at.desc())
          .all()
     )


def respond_to_renewal_offer(
     db: Session,
     offer_id: str,
     accept: bool,
     notifier: Optional[NotificationDispatcher] = None,
     now: Optional[datetime] = None,
) -> LeaseRenewalOffer:
     """
     Record the tenant's answer to an open offer and tell the agent.

     Only the offer changes; drafting the follow-up lease stays with
     the agent.
     """
     offer = db.get(LeaseRenewalOffer, offer_id)
     if offer is None:
          raise EntityNotFoundError(f"Renewal offer {offer_id} not found")
     if offer.status != RenewalOfferStatus.PENDING_TENANT_RESPONSE:
          raise InvalidEntityStateError(f"Renewal offer {offer_id} is already {offer.status.value}")

     notifier = notifier or NotificationDispatcher(db)
     offer.status = RenewalOfferStatus.ACCEPTED if accept else RenewalOfferStatus.DECLINED
     offer.responded_at = now or datetime.now()
     db.flush()

     decision = "accepted" if accept else "declined"
     notifier.send_notification(
          user_id=offer.agent_id,
          type="system",
          title=f"Renewal Offer {decision.capitalize()}",
          message=f"The tenant {decision} the renewal offer for lease {offer.original_lease_id}",
          priority="high" if accept else "medium",
          action_url=f"/agent/leases/{offer.original_lease_id}",
     )
     return offer
