"""Tests for lease renewal offers."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from exceptions import EntityNotFoundError, InvalidEntityStateError
from models import LeaseRenewalOffer, Notification
from models.lease_renewal_offer import RenewalOfferStatus
from services.lease_service import LeaseService
from services.renewal_service import (
    calculate_new_end_date,
    calculate_offer_expiry,
    calculate_renewal_rent,
    check_lease_renewals,
    get_renewal_offers,
    respond_to_renewal_offer,
)


class TestRenewalTerms:
    """Tests for the offer calculations."""

    def test_new_end_date_is_twelve_months_later(self) -> None:
        assert calculate_new_end_date(date(2024, 12, 31)) == date(2025, 12, 31)
        assert calculate_new_end_date(date(2024, 2, 29)) == date(2025, 2, 28)

    def test_rent_increase_rounded(self) -> None:
        assert calculate_renewal_rent(Decimal("85000")) == Decimal("87550")
        assert calculate_renewal_rent(Decimal("1050")) == Decimal("1082")

    def test_offer_expiry_thirty_days_before_end(self) -> None:
        assert calculate_offer_expiry(date(2024, 12, 31)) == datetime(2024, 12, 1)


class TestCheckLeaseRenewals:
    """Tests for the daily renewal sweep."""

    def test_creates_offer_inside_window(self, db, notifier, active_lease) -> None:
        created = check_lease_renewals(db, notifier, today=date(2024, 12, 1))

        assert created == 1
        offer = db.query(LeaseRenewalOffer).one()
        assert offer.original_lease_id == active_lease.id
        assert offer.proposed_start_date == date(2024, 12, 31)
        assert offer.proposed_end_date == date(2025, 12, 31)
        assert offer.proposed_rent == Decimal("87550")
        assert offer.status == RenewalOfferStatus.PENDING_TENANT_RESPONSE
        assert offer.expires_at == datetime(2024, 12, 1)

    def test_notifies_tenant_and_agent(self, db, notifier, active_lease) -> None:
        check_lease_renewals(db, notifier, today=date(2024, 12, 15))

        tenant = db.query(Notification).filter_by(user_id="tenant-001", title="Lease Renewal Offer").one()
        agent = db.query(Notification).filter_by(user_id="agent-001", title="Lease Renewal Initiated").one()
        assert tenant.priority == "high"
        assert tenant.action_url == f"/lease/{active_lease.id}/renewal"
        assert agent.priority == "medium"

    def test_outside_window_is_ignored(self, db, notifier, active_lease) -> None:
        assert check_lease_renewals(db, notifier, today=date(2024, 11, 30)) == 0
        assert db.query(LeaseRenewalOffer).count() == 0

    def test_inactive_leases_are_ignored(self, db, notifier, make_lease) -> None:
        make_lease()

        assert check_lease_renewals(db, notifier, today=date(2024, 12, 15)) == 0

    def test_repeated_sweep_creates_one_offer(self, db, notifier, active_lease) -> None:
        check_lease_renewals(db, notifier, today=date(2024, 12, 10))
        check_lease_renewals(db, notifier, today=date(2024, 12, 11))

        assert len(get_renewal_offers(db, active_lease.id)) == 1

    @pytest.mark.parametrize("accept", [True, False])
    def test_answered_offer_is_not_reissued(self, db, notifier, active_lease, accept) -> None:
        check_lease_renewals(db, notifier, today=date(2024, 12, 5))
        offer = get_renewal_offers(db, active_lease.id)[0]
        respond_to_renewal_offer(db, offer.id, accept, notifier)

        assert check_lease_renewals(db, notifier, today=date(2024, 12, 6)) == 0

        assert len(get_renewal_offers(db, active_lease.id)) == 1
        offers_sent = db.query(Notification).filter_by(user_id="tenant-001", title="Lease Renewal Offer").count()
        assert offers_sent == 1

    @pytest.mark.parametrize(
        "notice_days,today,created",
        [
            (60, date(2024, 11, 15), 1),
            (60, date(2024, 10, 31), 0),
            (7, date(2024, 12, 15), 0),
            (7, date(2024, 12, 24), 1),
        ],
    )
    def test_lease_notice_period_sets_window(self, db, notifier, make_lease, notice_days, today, created) -> None:
        lease = make_lease(terms={"rent_due_date": 1, "renewal_notice_days": notice_days})
        LeaseService.sign_lease(db, lease.id, "tenant", "sig-t", "10.0.0.1", notifier)
        LeaseService.sign_lease(db, lease.id, "agent", "sig-a", "10.0.0.2", notifier)

        assert lease.renewal_notice_days == notice_days
        assert check_lease_renewals(db, notifier, today=today) == created


class TestRespondToRenewalOffer:
    """Tests for respond_to_renewal_offer."""

    @pytest.fixture
    def offer(self, db, notifier, active_lease) -> LeaseRenewalOffer:
        check_lease_renewals(db, notifier, today=date(2024, 12, 10))
        return get_renewal_offers(db, active_lease.id)[0]

    def test_accept(self, db, notifier, offer) -> None:
        answered_at = datetime(2024, 12, 12, 14, 0)

        result = respond_to_renewal_offer(db, offer.id, True, notifier, now=answered_at)

        assert result.status == RenewalOfferStatus.ACCEPTED
        assert result.responded_at == answered_at
        notice = db.query(Notification).filter_by(user_id="agent-001", title="Renewal Offer Accepted").one()
        assert notice.priority == "high"

    def test_decline(self, db, notifier, offer) -> None:
        result = respond_to_renewal_offer(db, offer.id, False, notifier)

        assert result.status == RenewalOfferStatus.DECLINED

    def test_cannot_answer_twice(self, db, notifier, offer) -> None:
        respond_to_renewal_offer(db, offer.id, False, notifier)

        with pytest.raises(InvalidEntityStateError):
            respond_to_renewal_offer(db, offer.id, True, notifier)

    def test_unknown_offer(self, db, notifier) -> None:
        with pytest.raises(EntityNotFoundError):
            respond_to_renewal_offer(db, "missing", True, notifier)
