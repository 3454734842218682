"""
Payment Schedule Generator - expands a lease's date range into monthly
rent payments.

Due dates fall on the lease's configured due day. Months shorter than
that day use their last day (due day 31 -> 29 Feb in 2024).
"""
import logging
from calendar import monthrange
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ValidationError
from models import LeaseAgreement, RentPayment
from models.rent_payment import RentPaymentStatus

logger = logging.getLogger(__name__)


def add_months(value: date, months: int, day: Optional[int] = None) -> date:
     """
     Shift a date by whole months.

     `day` overrides the day of month; either way the result is clamped
     to the last day of the target month.
     """
     month_index = value.month - 1 + months
     year = value.year + month_index // 12
     month = month_index % 12 + 1
     target_day = value.day if day is None else day
     return date(year, month, min(target_day, monthrange(year, month)[1]))


def build_due_dates(start_date: date, end_date: date, due_day: int) -> List[date]:
     """
     Monthly due dates for a lease running from start_date to end_date.

     The first due date is the due day of the start month, moved one
     month later when it falls on or before the lease start. Dates after
     end_date are not emitted.
     """
     if not 1 <= due_day <= 31:
          raise ValidationError(f"Rent due day must be between 1 and 31, got {due_day}")

     anchor = start_date.replace(day=1)
     offset = 0
     if add_months(anchor, 0, due_day) <= start_date:
          offset = 1

     due_dates = []
     current = add_months(anchor, offset, due_day)
     while current <= end_date:
          due_dates.append(current)
          offset += 1
          current = add_months(anchor, offset, due_day)
     return due_dates


def generate_payment_schedule(db: Session, lease: LeaseAgreement) -> List[RentPayment]:
     """
     Create one pending RentPayment per due date of the lease.

     Rows are flushed, not committed; the caller's transaction decides.
     """
     due_dates = build_due_dates(lease.start_date, lease.end_date, lease.rent_due_day)

     payments = [
          RentPayment(
               lease_id=lease.id,
               tenant_id=lease.tenant_id,
               amount=lease.monthly_rent,
               due_date=due_date,
               status=RentPaymentStatus.PENDING,
          )
          for due_date in due_dates
     ]
     db.add_all(payments)
     db.flush()

     logger.info("Generated %d rent payments for lease %s", len(payments), lease.id)
     return payments
