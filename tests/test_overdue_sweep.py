"""Tests for the daily overdue payment sweep."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

from models import Notification
from models.rent_payment import RentPaymentStatus
from services import payment_service
from services.payment_service import check_overdue_payments, get_lease_payments


def _notifications(db, user_id: str, title: str) -> list[Notification]:
    return db.query(Notification).filter(Notification.user_id == user_id, Notification.title == title).all()


class TestCheckOverduePayments:
    """Tests for check_overdue_payments."""

    def test_within_grace_period_stays_pending(self, db, notifier, active_lease) -> None:
        # Jan 1 due, 3 days later is still inside the default grace period
        marked = check_overdue_payments(db, notifier, today=date(2024, 1, 4))

        assert marked == 0
        assert get_lease_payments(db, active_lease.id)[0].status == RentPaymentStatus.PENDING

    def test_marks_overdue_after_grace_period(self, db, notifier, active_lease) -> None:
        marked = check_overdue_payments(db, notifier, today=date(2024, 1, 5))

        payment = get_lease_payments(db, active_lease.id)[0]
        assert marked == 1
        assert payment.status == RentPaymentStatus.OVERDUE
        assert payment.late_fee == Decimal("4250.00")

        notice = _notifications(db, "tenant-001", "Payment Overdue")[0]
        assert notice.priority == "urgent"
        assert "by 4 days" in notice.message
        assert "KSh 4,250" in notice.message

    def test_flat_late_fee_from_terms(self, db, notifier, make_lease) -> None:
        lease = make_lease(terms={"rent_due_date": 1, "late_fee_amount": "2500", "late_fee_grace_days": 0})

        check_overdue_payments(db, notifier, today=date(2024, 1, 2))

        assert get_lease_payments(db, lease.id)[0].late_fee == Decimal("2500")

    def test_escalates_after_fourteen_days(self, db, notifier, active_lease) -> None:
        check_overdue_payments(db, notifier, today=date(2024, 1, 16))

        escalations = _notifications(db, "agent-001", "Rent Payment Escalation")
        assert len(escalations) == 1
        assert escalations[0].priority == "urgent"
        assert "15 days overdue" in escalations[0].message

    def test_no_escalation_at_fourteen_days(self, db, notifier, active_lease) -> None:
        check_overdue_payments(db, notifier, today=date(2024, 1, 15))

        assert _notifications(db, "agent-001", "Rent Payment Escalation") == []

    def test_already_overdue_payments_are_not_reprocessed(self, db, notifier, active_lease) -> None:
        check_overdue_payments(db, notifier, today=date(2024, 1, 10))

        assert check_overdue_payments(db, notifier, today=date(2024, 1, 11)) == 0
        assert len(_notifications(db, "tenant-001", "Payment Overdue")) == 1

    def test_paid_and_future_payments_untouched(self, db, notifier, active_lease) -> None:
        payments = get_lease_payments(db, active_lease.id)
        payments[0].status = RentPaymentStatus.PAID
        db.flush()

        marked = check_overdue_payments(db, notifier, today=date(2024, 2, 10))

        assert marked == 1
        assert payments[0].status == RentPaymentStatus.PAID
        assert payments[1].status == RentPaymentStatus.OVERDUE
        assert payments[2].status == RentPaymentStatus.PENDING

    def test_failure_on_one_payment_does_not_stop_sweep(self, db, notifier, active_lease) -> None:
        payments = get_lease_payments(db, active_lease.id)
        original = payment_service.process_overdue_payment

        def flaky(session, payment, dispatcher, today):
            if payment.id == payments[0].id:
                raise RuntimeError("boom")
            return original(session, payment, dispatcher, today)

        with patch.object(payment_service, "process_overdue_payment", side_effect=flaky):
            marked = check_overdue_payments(db, notifier, today=date(2024, 2, 10))

        assert marked == 1
        assert payments[0].status == RentPaymentStatus.PENDING
        assert payments[1].status == RentPaymentStatus.OVERDUE
