"""
Lease Service - Business logic layer for lease agreements.

Creates, signs, activates, terminates and expires leases. Methods flush
but never commit: the caller's session is the unit of work, so a lease,
its payment schedule and its notifications are stored together or not
at all.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from exceptions import (
     ConcurrentUpdateError,
     EntityNotFoundError,
     InvalidEntityStateError,
     ValidationError,
)
from models import LeaseAgreement
from models.lease import LeaseStatus, SIGNING_PARTIES, TERMINAL_LEASE_STATUSES
from schemas.lease import LeaseCreate
from services.notification_service import NotificationDispatcher, format_amount
from services.payment_schedule import generate_payment_schedule
from services.payment_service import cancel_future_payments

logger = logging.getLogger(__name__)


def _flush(db: Session, lease: LeaseAgreement) -> None:
     try:
          db.flush()
     except StaleDataError as exc:
          raise ConcurrentUpdateError(f"Lease {lease.id} was modified concurrently") from exc


class LeaseService:
     """Service class for lease lifecycle operations."""

     @staticmethod
     def get_lease(db: Session, lease_id: str) -> LeaseAgreement:
          """
          Fetch a lease by id.

          Raises:
               EntityNotFoundError: If the lease doesn't exist
          """
          lease = db.get(LeaseAgreement, lease_id)
          if lease is None:
               raise EntityNotFoundError(f"Lease {lease_id} not found")
          return lease

     @staticmethod
     def create_lease(
          db: Session,
          data: LeaseCreate,
          notifier: Optional[NotificationDispatcher] = None
     ) -> str:
          """
          Create a lease in draft status together with its payment schedule.

          Args:
               db: SQLAlchemy database session
               data: Validated lease fields
               notifier: Notification dispatcher (defaults to one on db)

          Returns:
               The new lease id
          """
          notifier = notifier or NotificationDispatcher(db)

          lease = LeaseAgreement(
               property_id=data.property_id,
               tenant_id=data.tenant_id,
               agent_id=data.agent_id,
               lease_type=data.lease_type,
               start_date=data.start_date,
               end_date=data.end_date,
               monthly_rent=data.monthly_rent,
               security_deposit=data.security_deposit,
               status=LeaseStatus.DRAFT,
               terms=data.terms.model_dump(mode="json"),
               documents=[doc.model_dump(mode="json") for doc in data.documents],
               signatures=[],
          )

          try:
               db.add(lease)
               db.flush()
               generate_payment_schedule(db, lease)
          except SQLAlchemyError:
               logger.exception("Error creating lease for tenant %s", data.tenant_id)
               raise

          notifier.send_notification(
               user_id=lease.tenant_id,
               type="system",
               title="Lease Agreement Created",
               message="Your lease agreement has been created and is ready for review",
               priority="high",
               action_url=f"/lease/{lease.id}",
          )

          logger.info("Created lease %s for property %s", lease.id, lease.property_id)
          return lease.id

     @staticmethod
     def sign_lease(
          db: Session,
          lease_id: str,
          party: str,
          signature_data: str,
          ip_address: str,
          notifier: Optional[NotificationDispatcher] = None,
          now: Optional[datetime] = None
     ) -> LeaseAgreement:
          """
          Record a party's signature.

          The lease becomes active once both tenant and agent have signed;
          until then it waits in pending_signature.

          Raises:
               ValidationError: Unknown signing party
               EntityNotFoundError: Unknown lease
               InvalidEntityStateError: Lease is terminated/expired, or the
                    party has already signed
          """
          if party not in SIGNING_PARTIES:
               raise ValidationError(f"Unknown signing party '{party}'")

          lease = LeaseService.get_lease(db, lease_id)
          if lease.status in TERMINAL_LEASE_STATUSES:
               raise InvalidEntityStateError(f"Lease {lease_id} is {lease.status.value} and cannot be signed")
          if party in lease.signed_parties:
               raise InvalidEntityStateError(f"Lease {lease_id} was already signed by the {party}")

          notifier = notifier or NotificationDispatcher(db)
          now = now or datetime.now()
          was_active = lease.status == LeaseStatus.ACTIVE

          # New list so the JSON column change is detected
          lease.signatures = list(lease.signatures or []) + [{
               "party": party,
               "signed_at": now.isoformat(),
               "signature_data": signature_data,
               "ip_address": ip_address,
          }]

          all_signed = lease.is_fully_signed
          lease.status = LeaseStatus.ACTIVE if all_signed else LeaseStatus.PENDING_SIGNATURE
          _flush(db, lease)

          if all_signed and not was_active:
               LeaseService._notify_lease_activation(lease, notifier)
          elif not all_signed:
               LeaseService._notify_signature_received(lease, party, notifier)

          return lease

     @staticmethod
     def update_lease_status(
          db: Session,
          lease_id: str,
          status: LeaseStatus,
          notifier: Optional[NotificationDispatcher] = None,
          now: Optional[datetime] = None
     ) -> LeaseAgreement:
          """
          Overwrite a lease's status.

          `active` runs the activation hook; `terminated` runs the full
          termination (payments cancelled, deposit return, notices).
          """
          if status == LeaseStatus.TERMINATED:
               return LeaseService.terminate_lease(db, lease_id, notifier=notifier, now=now)

          lease = LeaseService.get_lease(db, lease_id)
          lease.status = status
          _flush(db, lease)

          if status == LeaseStatus.ACTIVE:
               LeaseService._activate_lease(lease)

          return lease

     @staticmethod
     def terminate_lease(
          db: Session,
          lease_id: str,
          reason: Optional[str] = None,
          notifier: Optional[NotificationDispatcher] = None,
          now: Optional[datetime] = None
     ) -> LeaseAgreement:
          """
          Terminate a lease.

          Pending payments due after today are cancelled; paid, partial,
          overdue and past records stay as they are.

          Raises:
               InvalidEntityStateError: Lease already terminated or expired
          """
          lease = LeaseService.get_lease(db, lease_id)
          if lease.status in TERMINAL_LEASE_STATUSES:
               raise InvalidEntityStateError(f"Lease {lease_id} is already {lease.status.value}")

          notifier = notifier or NotificationDispatcher(db)
          now = now or datetime.now()

          lease.status = LeaseStatus.TERMINATED
          lease.termination_date = now
          lease.termination_reason = reason
          _flush(db, lease)

          cancelled = cancel_future_payments(db, lease.id, now.date())
          logger.info("Terminated lease %s, cancelled %d future payments", lease.id, cancelled)

          LeaseService._schedule_security_deposit_return(lease, notifier)
          LeaseService._notify_lease_termination(lease, reason, notifier)
          return lease

     @staticmethod
     def attach_document(
          db: Session,
          lease_id: str,
          doc_type: str,
          name: str,
          url: str,
          now: Optional[datetime] = None
     ) -> dict:
          """Append a document record (already uploaded to storage) to a lease."""
          lease = LeaseService.get_lease(db, lease_id)
          document = {
               "type": doc_type,
               "url": url,
               "name": name,
               "uploaded_at": (now or datetime.now()).isoformat(),
          }
          lease.documents = list(lease.documents or []) + [document]
          _flush(db, lease)
          return document

     @staticmethod
     def get_tenant_leases(db: Session, tenant_id: str) -> List[LeaseAgreement]:
          return (
               db.query(LeaseAgreement)
               .filter(LeaseAgreement.tenant_id == tenant_id)
               .order_by(LeaseAgreement.created_at.desc())
               .all()
          )

     @staticmethod
     def get_agent_leases(db: Session, agent_id: str) -> List[LeaseAgreement]:
          return (
               db.query(LeaseAgreement)
               .filter(LeaseAgreement.agent_id == agent_id)
               .order_by(LeaseAgreement.created_at.desc())
               .all()
          )

     @staticmethod
     def expire_ended_leases(
          db: Session,
          notifier: Optional[NotificationDispatcher] = None,
          today: Optional[date] = None
     ) -> int:
          """
          Move active leases whose end date has passed to `expired`.

          This should be called by a scheduled job daily. Failures are
          logged per lease and do not stop the sweep.

          Returns:
               Number of leases expired
          """
          today = today or date.today()
          notifier = notifier or NotificationDispatcher(db)

          ended = (
               db.query(LeaseAgreement)
               .filter(
                    LeaseAgreement.status == LeaseStatus.ACTIVE,
                    LeaseAgreement.end_date < today
               )
               .all()
          )

          count = 0
          for lease in ended:
               try:
                    with db.begin_nested():
                         lease.status = LeaseStatus.EXPIRED
                         db.flush()
                         for user_id in (lease.tenant_id, lease.agent_id):
                              notifier.send_notification(
                                   user_id=user_id,
                                   type="system",
                                   title="Lease Expired",
                                   message=f"The lease that ended on {lease.end_date.isoformat()} has expired",
                                   priority="medium",
                                   action_url=f"/lease/{lease.id}",
                              )
               except Exception:
                    logger.exception("Error expiring lease %s", lease.id)
                    continue
               count += 1

          logger.info("Expired %d leases ending before %s", count, today)
          return count

     # ------------------------------------------------------------------
     # Lifecycle hooks
     # ------------------------------------------------------------------

     @staticmethod
     def _activate_lease(lease: LeaseAgreement) -> None:
          logger.info("Activating lease %s", lease.id)

     @staticmethod
     def _notify_lease_activation(lease: LeaseAgreement, notifier: NotificationDispatcher) -> None:
          LeaseService._activate_lease(lease)
          for user_id in (lease.tenant_id, lease.agent_id):
               notifier.send_notification(
                    user_id=user_id,
                    type="system",
                    title="Lease Activated",
                    message=f"All parties have signed. The lease starting {lease.start_date.isoformat()} is now active",
                    priority="high",
                    action_url=f"/lease/{lease.id}",
               )

     @staticmethod
     def _notify_signature_received(lease: LeaseAgreement, party: str, notifier: NotificationDispatcher) -> None:
          logger.info("Signature received from %s for lease %s", party, lease.id)
          waiting_on = {"tenant": lease.tenant_id, "agent": lease.agent_id}
          for other_party, user_id in waiting_on.items():
               if other_party in lease.signed_parties:
                    continue
               notifier.send_notification(
                    user_id=user_id,
                    type="system",
                    title="Signature Required",
                    message=f"The {party} has signed the lease agreement. Your signature is needed to activate it",
                    priority="high",
                    action_url=f"/lease/{lease.id}",
               )

     @staticmethod
     def _schedule_security_deposit_return(lease: LeaseAgreement, notifier: NotificationDispatcher) -> None:
          logger.info("Scheduling security deposit return for lease %s", lease.id)
          notifier.send_notification(
               user_id=lease.agent_id,
               type="system",
               title="Security Deposit Return",
               message=f"Security deposit of KSh {format_amount(lease.security_deposit)} is due for return",
               priority="high",
               action_url=f"/agent/leases/{lease.id}",
               data={"lease_id": lease.id, "security_deposit": lease.security_deposit},
          )

     @staticmethod
     def _notify_lease_termination(
          lease: LeaseAgreement,
          reason: Optional[str],
          notifier: NotificationDispatcher
     ) -> None:
          message = "Your lease agreement has been terminated"
          if reason:
               message += f": {reason}"
          for user_id in (lease.tenant_id, lease.agent_id):
               notifier.send_notification(
                    user_id=user_id,
                    type="system",
                    title="Lease Terminated",
                    message=message,
                    priority="high",
                    action_url=f"/lease/{lease.id}",
               )
