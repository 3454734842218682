"""Tests for the HTTP API."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from database import get_session
from main import app
from services.notification_service import NotificationDispatcher
from services.renewal_service import check_lease_renewals

LEASE_BODY = {
    "property_id": "prop-001",
    "tenant_id": "tenant-001",
    "agent_id": "agent-001",
    "start_date": "2023-12-31",
    "end_date": "2024-12-31",
    "monthly_rent": 85000,
    "security_deposit": 85000,
    "terms": {"rent_due_date": 1, "late_fee_grace_days": 3},
}


@pytest.fixture
def client(session_factory):
    def _session_override():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def lease_id(client) -> str:
    response = client.post("/api/leases", json=LEASE_BODY)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def active_lease_id(client, lease_id) -> str:
    for party in ("tenant", "agent"):
        response = client.post(f"/api/leases/{lease_id}/sign", json={"party": party, "signature_data": "sig"})
        assert response.status_code == 200
    return lease_id


class TestLeaseRoutes:
    """Tests for /api/leases."""

    def test_create_lease(self, client) -> None:
        response = client.post("/api/leases", json=LEASE_BODY)

        assert response.status_code == 201
        assert response.json()["payments_scheduled"] == 12

    def test_end_before_start_rejected(self, client) -> None:
        body = dict(LEASE_BODY, end_date="2023-12-01")

        assert client.post("/api/leases", json=body).status_code == 422

    def test_get_lease(self, client, lease_id) -> None:
        response = client.get(f"/api/leases/{lease_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "draft"
        assert response.json()["terms"]["rent_due_date"] == 1

    def test_unknown_lease_is_404(self, client) -> None:
        response = client.get("/api/leases/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Lease missing not found"}

    def test_list_requires_tenant_or_agent(self, client, lease_id) -> None:
        assert client.get("/api/leases").status_code == 400
        assert [lease["id"] for lease in client.get("/api/leases", params={"tenant_id": "tenant-001"}).json()] == [
            lease_id
        ]
        assert len(client.get("/api/leases", params={"agent_id": "agent-001"}).json()) == 1

    def test_signing_activates_lease(self, client, active_lease_id) -> None:
        lease = client.get(f"/api/leases/{active_lease_id}").json()

        assert lease["status"] == "active"
        assert [s["party"] for s in lease["signatures"]] == ["tenant", "agent"]
        assert lease["signatures"][0]["ip_address"] == "testclient"

    def test_duplicate_signature_is_409(self, client, lease_id) -> None:
        body = {"party": "tenant", "signature_data": "sig", "ip_address": "10.0.0.1"}
        client.post(f"/api/leases/{lease_id}/sign", json=body)

        assert client.post(f"/api/leases/{lease_id}/sign", json=body).status_code == 409

    def test_unknown_party_is_422(self, client, lease_id) -> None:
        response = client.post(f"/api/leases/{lease_id}/sign", json={"party": "guarantor", "signature_data": "s"})

        assert response.status_code == 422

    def test_terminate(self, client, active_lease_id) -> None:
        response = client.post(f"/api/leases/{active_lease_id}/terminate", json={"reason": "Relocation"})

        assert response.status_code == 200
        assert response.json()["status"] == "terminated"
        assert response.json()["termination_reason"] == "Relocation"
        assert client.post(f"/api/leases/{active_lease_id}/terminate", json={}).status_code == 409

    def test_status_update(self, client, lease_id) -> None:
        response = client.patch(f"/api/leases/{lease_id}/status", json={"status": "pending_signature"})

        assert response.status_code == 200
        assert response.json()["status"] == "pending_signature"

    def test_lease_payments(self, client, lease_id) -> None:
        payments = client.get(f"/api/leases/{lease_id}/payments").json()

        assert len(payments) == 12
        assert payments[0]["due_date"] == "2024-01-01"
        assert payments[0]["status"] == "pending"

    def test_upload_document(self, client, lease_id) -> None:
        with patch("routers.leases.upload_to_blob", return_value="https://blob.example/lease.pdf") as upload:
            response = client.post(
                f"/api/leases/{lease_id}/documents",
                files={"document": ("lease.pdf", b"%PDF-1.4", "application/pdf")},
                data={"doc_type": "lease_agreement"},
            )

        assert response.status_code == 201
        assert response.json()["url"] == "https://blob.example/lease.pdf"
        assert upload.call_args.kwargs["prefix"] == lease_id
        documents = client.get(f"/api/leases/{lease_id}").json()["documents"]
        assert documents[-1]["type"] == "lease_agreement"

    def test_upload_without_storage_config_is_503(self, client, lease_id) -> None:
        response = client.post(
            f"/api/leases/{lease_id}/documents",
            files={"document": ("lease.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 503


class TestPaymentRoutes:
    """Tests for /api/payments."""

    def test_partial_then_retry(self, client, active_lease_id) -> None:
        payment_id = client.get(f"/api/leases/{active_lease_id}/payments").json()[0]["id"]
        body = {"amount": 40000, "payment_method": "mpesa", "transaction_id": "TXN-1"}

        first = client.post(f"/api/payments/{payment_id}/pay", json=body).json()
        retry = client.post(f"/api/payments/{payment_id}/pay", json=body).json()

        assert first["status"] == "partial"
        assert Decimal(first["balance"]) == Decimal("45000")
        assert first["already_applied"] is False
        assert retry["already_applied"] is True
        assert Decimal(retry["amount_paid"]) == Decimal("40000")

    def test_non_positive_amount_is_422(self, client, active_lease_id) -> None:
        payment_id = client.get(f"/api/leases/{active_lease_id}/payments").json()[0]["id"]
        body = {"amount": 0, "payment_method": "mpesa", "transaction_id": "TXN-1"}

        assert client.post(f"/api/payments/{payment_id}/pay", json=body).status_code == 422

    def test_upcoming(self, client, active_lease_id) -> None:
        upcoming = client.get("/api/payments/upcoming", params={"tenant_id": "tenant-001", "limit": 2}).json()

        assert [p["due_date"] for p in upcoming] == ["2024-01-01", "2024-02-01"]

    def test_unknown_payment(self, client) -> None:
        assert client.get("/api/payments/missing").status_code == 404


class TestMaintenanceRoutes:
    """Tests for /api/maintenance-requests."""

    def test_create_list_update(self, client, active_lease_id) -> None:
        body = {
            "lease_id": active_lease_id,
            "tenant_id": "tenant-001",
            "agent_id": "agent-001",
            "title": "Leaking sink",
            "description": "Water under the sink",
            "category": "plumbing",
            "priority": "high",
        }
        created = client.post("/api/maintenance-requests", json=body)
        assert created.status_code == 201
        request_id = created.json()["id"]

        listed = client.get("/api/maintenance-requests", params={"lease_id": active_lease_id}).json()
        assert [r["id"] for r in listed] == [request_id]

        updated = client.patch(
            f"/api/maintenance-requests/{request_id}/status",
            json={
                "status": "in_progress",
                "contractor_info": {"name": "Fixit", "phone": "0700000000", "email": "fix@example.com"},
            },
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "in_progress"
        assert updated.json()["contractor_info"]["name"] == "Fixit"

    def test_unknown_lease_is_404(self, client) -> None:
        body = {
            "lease_id": "missing",
            "tenant_id": "tenant-001",
            "agent_id": "agent-001",
            "title": "Leak",
            "description": "Leak",
        }

        assert client.post("/api/maintenance-requests", json=body).status_code == 404


class TestRenewalRoutes:
    """Tests for /api/renewal-offers."""

    def test_list_and_respond(self, client, session_factory, active_lease_id) -> None:
        with session_factory() as session:
            check_lease_renewals(session, NotificationDispatcher(session, email_enabled=False), today=date(2024, 12, 5))
            session.commit()

        offers = client.get("/api/renewal-offers", params={"lease_id": active_lease_id}).json()
        assert len(offers) == 1
        assert Decimal(offers[0]["proposed_rent"]) == Decimal("87550")

        response = client.post(f"/api/renewal-offers/{offers[0]['id']}/respond", json={"accept": True})
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"

        again = client.post(f"/api/renewal-offers/{offers[0]['id']}/respond", json={"accept": False})
        assert again.status_code == 409


class TestNotificationRoutes:
    """Tests for /api/notifications."""

    def test_list_and_mark_read(self, client, lease_id) -> None:
        notifications = client.get("/api/notifications", params={"user_id": "tenant-001"}).json()
        assert [n["title"] for n in notifications] == ["Lease Agreement Created"]

        notification_id = notifications[0]["id"]
        response = client.post(f"/api/notifications/{notification_id}/read", params={"user_id": "tenant-001"})
        assert response.status_code == 200
        assert response.json()["read"] is True

        unread = client.get("/api/notifications", params={"user_id": "tenant-001", "unread_only": True}).json()
        assert unread == []

    def test_mark_all_read(self, client, active_lease_id) -> None:
        response = client.post("/api/notifications/read-all", params={"user_id": "agent-001"})

        assert response.status_code == 200
        assert response.json()["updated"] >= 1

    def test_preferences_round_trip(self, client) -> None:
        body = {
            "email": "tenant@example.com",
            "email_notifications": True,
            "notification_types": {"payments": False},
            "quiet_hours": {"enabled": True, "start_time": "21:00", "end_time": "07:00"},
        }

        assert client.put("/api/notifications/preferences/tenant-001", json=body).status_code == 200

        stored = client.get("/api/notifications/preferences/tenant-001").json()
        assert stored["email"] == "tenant@example.com"
        assert stored["notification_types"]["payments"] is False
        assert stored["quiet_hours"]["start_time"] == "21:00"


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": True}
