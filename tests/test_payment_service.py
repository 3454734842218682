"""Tests for applying rent payments."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.orm.exc import StaleDataError

from exceptions import ConcurrentUpdateError, EntityNotFoundError, InvalidEntityStateError, ValidationError
from models import Notification, RentPaymentTransaction
from models.rent_payment import RentPaymentStatus
from services.payment_service import (
    calculate_late_fee,
    get_lease_payments,
    get_upcoming_payments,
    process_rent_payment,
)


@pytest.fixture
def first_payment(db, active_lease):
    return get_lease_payments(db, active_lease.id)[0]


def _tenant_messages(db) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == "tenant-001", Notification.type == "payment")
        .all()
    )


class TestProcessRentPayment:
    """Tests for process_rent_payment."""

    def test_full_payment(self, db, notifier, first_payment) -> None:
        paid_at = datetime(2024, 1, 1, 8, 0)

        payment, applied = process_rent_payment(
            db, first_payment.id, Decimal("85000"), "mpesa", "TXN-1", notifier, now=paid_at
        )

        assert applied is True
        assert payment.status == RentPaymentStatus.PAID
        assert payment.amount_paid == Decimal("85000")
        assert payment.paid_date == paid_at
        assert payment.payment_method == "mpesa"
        assert payment.transaction_id == "TXN-1"
        assert [n.title for n in _tenant_messages(db)] == ["Payment Successful"]

    def test_partial_payment_sends_reminder_for_balance(self, db, notifier, first_payment) -> None:
        payment, _ = process_rent_payment(db, first_payment.id, Decimal("40000"), "mpesa", "TXN-1", notifier)

        assert payment.status == RentPaymentStatus.PARTIAL
        assert payment.balance == Decimal("45000")
        messages = {n.title: n.message for n in _tenant_messages(db)}
        assert "KSh 40,000" in messages["Payment Successful"]
        assert "KSh 45,000" in messages["Payment Reminder"]

    def test_partial_payments_accumulate(self, db, notifier, first_payment) -> None:
        process_rent_payment(db, first_payment.id, Decimal("40000"), "mpesa", "TXN-1", notifier)
        payment, _ = process_rent_payment(db, first_payment.id, Decimal("45000"), "card", "TXN-2", notifier)

        assert payment.status == RentPaymentStatus.PAID
        assert payment.amount_paid == Decimal("85000")
        assert payment.balance == Decimal("0.00")
        assert db.query(RentPaymentTransaction).filter_by(payment_id=payment.id).count() == 2

    def test_late_fee_is_part_of_amount_due(self, db, notifier, first_payment) -> None:
        first_payment.mark_as_overdue(Decimal("4250"))
        db.flush()

        payment, _ = process_rent_payment(db, first_payment.id, Decimal("85000"), "mpesa", "TXN-1", notifier)
        assert payment.status == RentPaymentStatus.PARTIAL
        assert payment.balance == Decimal("4250")

        payment, _ = process_rent_payment(db, first_payment.id, Decimal("4250"), "mpesa", "TXN-2", notifier)
        assert payment.status == RentPaymentStatus.PAID

    def test_same_transaction_applied_once(self, db, notifier, first_payment) -> None:
        process_rent_payment(db, first_payment.id, Decimal("40000"), "mpesa", "TXN-1", notifier)
        before = len(_tenant_messages(db))

        payment, applied = process_rent_payment(db, first_payment.id, Decimal("40000"), "mpesa", "TXN-1", notifier)

        assert applied is False
        assert payment.amount_paid == Decimal("40000")
        assert payment.status == RentPaymentStatus.PARTIAL
        assert len(_tenant_messages(db)) == before

    def test_transaction_reused_for_other_payment(self, db, notifier, active_lease) -> None:
        first, second = get_lease_payments(db, active_lease.id)[:2]
        process_rent_payment(db, first.id, Decimal("85000"), "mpesa", "TXN-1", notifier)

        with pytest.raises(ValidationError):
            process_rent_payment(db, second.id, Decimal("85000"), "mpesa", "TXN-1", notifier)

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    def test_rejects_non_positive_amount(self, db, notifier, first_payment, amount) -> None:
        with pytest.raises(ValidationError):
            process_rent_payment(db, first_payment.id, amount, "mpesa", "TXN-1", notifier)

    def test_rejects_paid_payment(self, db, notifier, first_payment) -> None:
        process_rent_payment(db, first_payment.id, Decimal("85000"), "mpesa", "TXN-1", notifier)

        with pytest.raises(InvalidEntityStateError):
            process_rent_payment(db, first_payment.id, Decimal("1"), "mpesa", "TXN-2", notifier)

    def test_rejects_cancelled_payment(self, db, notifier, first_payment) -> None:
        first_payment.cancel()
        db.flush()

        with pytest.raises(InvalidEntityStateError):
            process_rent_payment(db, first_payment.id, Decimal("85000"), "mpesa", "TXN-1", notifier)

    def test_unknown_payment(self, db, notifier) -> None:
        with pytest.raises(EntityNotFoundError):
            process_rent_payment(db, "missing", Decimal("1"), "mpesa", "TXN-1", notifier)

    def test_concurrent_update_is_reported(self, db, notifier, first_payment) -> None:
        with patch.object(db, "flush", side_effect=StaleDataError("version mismatch")):
            with pytest.raises(ConcurrentUpdateError):
                process_rent_payment(db, first_payment.id, Decimal("85000"), "mpesa", "TXN-1", notifier)


class TestLateFee:
    """Tests for calculate_late_fee."""

    def test_flat_fee_from_terms(self, db, make_lease) -> None:
        lease = make_lease(terms={"late_fee_amount": "2500"})
        payment = get_lease_payments(db, lease.id)[0]

        assert calculate_late_fee(payment, lease) == Decimal("2500")

    def test_five_percent_default(self, db, active_lease) -> None:
        payment = get_lease_payments(db, active_lease.id)[0]

        assert calculate_late_fee(payment, active_lease) == Decimal("4250.00")


class TestUpcomingPayments:
    """Tests for get_upcoming_payments."""

    def test_open_payments_earliest_first(self, db, notifier, active_lease) -> None:
        payments = get_lease_payments(db, active_lease.id)
        process_rent_payment(db, payments[0].id, Decimal("85000"), "mpesa", "TXN-1", notifier)
        payments[1].mark_as_overdue(Decimal("4250"))
        db.flush()

        upcoming = get_upcoming_payments(db, "tenant-001", limit=3)

        assert [p.due_date for p in upcoming] == [date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1)]
