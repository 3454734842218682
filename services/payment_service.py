"""
Rent Payment Service - applying payments and the overdue sweep.

process_rent_payment() applies money to one scheduled RentPayment:
1. Rejects non-positive amounts, cancelled and fully paid payments
2. Records a RentPaymentTransaction (unique transaction_id)
3. Adds the amount to amount_paid: paid when it covers rent + late fee,
   partial otherwise
4. Sends a success notification, and a reminder for any balance left

A transaction id that was already applied is a no-op, so a provider
retrying its callback cannot double-apply a payment.

check_overdue_payments() is the daily sweep; see its docstring.
"""
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from exceptions import (
     ConcurrentUpdateError,
     EntityNotFoundError,
     InvalidEntityStateError,
     ValidationError,
)
from models import LeaseAgreement, RentPayment, RentPaymentTransaction
from models.rent_payment import OPEN_PAYMENT_STATUSES, RentPaymentStatus
from services.notification_service import NotificationDispatcher, format_amount

logger = logging.getLogger(__name__)

# Late fee when the lease has no flat amount configured
DEFAULT_LATE_FEE_RATE = Decimal("0.05")

# Payments overdue for longer than this are escalated to the agent
ESCALATION_THRESHOLD_DAYS = 14

CENTS = Decimal("0.01")


def get_payment(db: Session, payment_id: str) -> RentPayment:
     payment = db.get(RentPayment, payment_id)
     if payment is None:
          raise EntityNotFoundError(f"Rent payment {payment_id} not found")
     return payment


def process_rent_payment(
     db: Session,
     payment_id: str,
     amount: Decimal,
     payment_method: str,
     transaction_id: str,
     notifier: Optional[NotificationDispatcher] = None,
     now: Optional[datetime] = None,
) -> Tuple[RentPayment, bool]:
     """
     Apply an incoming payment to a scheduled rent payment.

     Args:
          db: SQLAlchemy database session
          payment_id: RentPayment the money is for
          amount: Amount received (must be positive)
          payment_method: e.g. "mpesa", "card"
          transaction_id: Provider reference, unique per payment
          notifier: Notification dispatcher (defaults to one on db)
          now: Timestamp recorded as paid_date (default: now)

     Returns:
          (payment, applied) - applied is False when the transaction id
          had already been applied to this payment.

     Raises:
          ValidationError: Non-positive amount, or the transaction id was
               used for a different payment
          EntityNotFoundError: Unknown payment
          InvalidEntityStateError: Payment is cancelled or already paid
          ConcurrentUpdateError: The payment changed while being applied
     """
     amount = Decimal(str(amount))
     if amount <= 0:
          raise ValidationError(f"Payment amount must be positive, got {amount}")

     existing = (
          db.query(RentPaymentTransaction)
          .filter(RentPaymentTransaction.transaction_id == transaction_id)
          .first()
     )
     if existing is not None:
          if existing.payment_id != payment_id:
               raise ValidationError(
                    f"Transaction {transaction_id} was already applied to payment {existing.payment_id}"
               )
          logger.info("Transaction %s already applied to payment %s", transaction_id, payment_id)
          return get_payment(db, payment_id), False

     payment = get_payment(db, payment_id)
     if payment.status == RentPaymentStatus.CANCELLED:
          raise InvalidEntityStateError(f"Rent payment {payment_id} is cancelled")
     if payment.status == RentPaymentStatus.PAID:
          raise InvalidEntityStateError(f"Rent payment {payment_id} is already paid")

     notifier = notifier or NotificationDispatcher(db)
     now = now or datetime.now()

     payment.amount_paid = Decimal(payment.amount_paid or 0) + amount
     is_full_payment = payment.amount_paid >= payment.amount_due
     payment.status = RentPaymentStatus.PAID if is_full_payment else RentPaymentStatus.PARTIAL
     payment.paid_date = now
     payment.payment_method = payment_method
     payment.transaction_id = transaction_id

     db.add(RentPaymentTransaction(
          payment_id=payment.id,
          transaction_id=transaction_id,
          amount=amount,
          payment_method=payment_method,
          received_at=now,
     ))

     try:
          db.flush()
     except StaleDataError as exc:
          raise ConcurrentUpdateError(f"Rent payment {payment_id} was modified concurrently") from exc
     except SQLAlchemyError:
          logger.exception("Error processing rent payment %s", payment_id)
          raise

     logger.info(
          "Applied %s to rent payment %s (status=%s, balance=%s)",
          amount, payment.id, payment.status.value, payment.balance,
     )

     notifier.send_payment_notification(
          payment.tenant_id,
          {"amount": amount, "payment_id": payment.id, "property_title": "Rental Property"},
          "success",
     )

     if not is_full_payment:
          schedule_payment_reminder(notifier, payment.tenant_id, payment.balance, payment.id)

     return payment, True


def schedule_payment_reminder(
     notifier: NotificationDispatcher,
     tenant_id: str,
     remaining_amount: Decimal,
     payment_id: str,
) -> None:
     """Remind the tenant of the balance left after a partial payment."""
     logger.info("Scheduling payment reminder for tenant %s: %s remaining", tenant_id, remaining_amount)
     notifier.send_payment_notification(
          tenant_id,
          {"amount": remaining_amount, "payment_id": payment_id},
          "reminder",
     )


def calculate_late_fee(payment: RentPayment, lease: LeaseAgreement) -> Decimal:
     """Flat fee from the lease terms, else 5% of the payment amount."""
     if lease.late_fee_amount > 0:
          return lease.late_fee_amount
     return (Decimal(payment.amount) * DEFAULT_LATE_FEE_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)


def check_overdue_payments(
     db: Session,
     notifier: Optional[NotificationDispatcher] = None,
     today: Optional[date] = None,
) -> int:
     """
     Daily sweep over pending payments whose due date has passed.

     Each payment is handled in its own savepoint: a failure is logged
     and rolled back for that payment only, and the sweep moves on.

     Returns:
          Number of payments marked overdue
     """
     today = today or date.today()
     notifier = notifier or NotificationDispatcher(db)

     candidates = (
          db.query(RentPayment)
          .filter(
               RentPayment.status == RentPaymentStatus.PENDING,
               RentPayment.due_date < today
          )
          .order_by(RentPayment.due_date)
          .all()
     )

     marked = 0
     for payment in candidates:
          try:
               with db.begin_nested():
                    marked_overdue = process_overdue_payment(db, payment, notifier, today)
          except Exception:
               logger.exception("Error processing overdue payment %s", payment.id)
               continue
          if marked_overdue:
               marked += 1

     logger.info("Overdue sweep for %s: %d of %d pending payments marked overdue", today, marked, len(candidates))
     return marked


def process_overdue_payment(
     db: Session,
     payment: RentPayment,
     notifier: NotificationDispatcher,
     today: date,
) -> bool:
     """
     Mark one payment overdue once its grace period has passed.

     Returns:
          True when the payment was marked overdue
     """
     days_overdue = (today - payment.due_date).days
     lease = payment.lease

     if days_overdue <= lease.grace_days:
          return False

     late_fee = calculate_late_fee(payment, lease)
     payment.mark_as_overdue(late_fee)
     db.flush()

     notifier.send_payment_notification(
          payment.tenant_id,
          {
               "amount": payment.amount,
               "late_fee": late_fee,
               "days_overdue": days_overdue,
               "payment_id": payment.id,
          },
          "overdue",
     )

     if days_overdue > ESCALATION_THRESHOLD_DAYS:
          escalate_overdue_payment(payment, days_overdue, notifier)

     return True


def escalate_overdue_payment(payment: RentPayment, days_overdue: int, notifier: NotificationDispatcher) -> None:
     """Alert the lease's agent about a severely overdue payment."""
     logger.warning("Escalating overdue payment %s, %d days overdue", payment.id, days_overdue)
     notifier.send_notification(
          user_id=payment.lease.agent_id,
          type="payment",
          title="Rent Payment Escalation",
          message=(
               f"Rent of KSh {format_amount(payment.amount)} due {payment.due_date.isoformat()} "
               f"is {days_overdue} days overdue"
          ),
          priority="urgent",
          action_url=f"/agent/leases/{payment.lease_id}",
          data={"payment_id": payment.id, "days_overdue": days_overdue},
     )


def cancel_future_payments(db: Session, lease_id: str, today: date) -> int:
     """
     Cancel pending payments of a lease due after `today`.

     Paid, partial, overdue and past records are left untouched.

     Returns:
          Number of payments cancelled
     """
     future_payments = (
          db.query(RentPayment)
          .filter(
               RentPayment.lease_id == lease_id,
               RentPayment.status == RentPaymentStatus.PENDING,
               RentPayment.due_date > today
          )
          .all()
     )
     for payment in future_payments:
          payment.cancel()
     db.flush()
     return len(future_payments)


def get_upcoming_payments(db: Session, tenant_id: str, limit: int = 5) -> List[RentPayment]:
     """Open (pending, partial, overdue) payments of a tenant, earliest first."""
     return (
          db.query(RentPayment)
          .filter(
               RentPayment.tenant_id == tenant_id,
               RentPayment.status.in_(OPEN_PAYMENT_STATUSES)
          )
          .order_by(RentPayment.due_date.asc())
          .limit(limit)
          .all()
     )


def get_lease_payments(db: Session, lease_id: str) -> List[RentPayment]:
     return (
          db.query(RentPayment)
          .filter(RentPayment.lease_id == lease_id)
          .order_by(RentPayment.due_date.asc())
          .all()
     )
