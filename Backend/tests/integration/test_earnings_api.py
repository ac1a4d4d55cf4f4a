"""Earnings summary, payment history, advances and withdrawals."""
import json
import uuid
from datetime import date
from urllib.parse import parse_qs

import httpx
import pytest
from sqlalchemy import update

from onesync.models.payment import PaymentHistory
from onesync.models.royalty_advance import RoyaltyAdvance
from onesync.models.user import User
from onesync.services.intercom import IntercomService, get_intercom_service
from onesync.services.stripe_service import StripeService, get_stripe_service

BANK = {
    "payment_method": "bank-transfer",
    "account_holder_name": "Nova Lights",
    "routing_number": "110000000",
    "account_number": "000123456789",
    "confirm_account_number": "000123456789",
}


class StripeStub:
    """Answers the external-account and payout calls; `fail` makes both return 500, `garbled` a 200 HTML page."""

    def __init__(self, fail=False, garbled=False):
        self.fail = fail
        self.garbled = garbled
        self.forms = []

    def __call__(self, request):
        if self.fail:
            return httpx.Response(500, text="stripe down")
        if self.garbled:
            return httpx.Response(200, text="<html>gateway</html>")
        self.forms.append(parse_qs(request.content.decode()))
        if request.url.path.endswith("/external_accounts"):
            return httpx.Response(200, json={"id": "ba_123"})
        return httpx.Response(200, json={"id": "po_456", "status": "pending"})


@pytest.fixture
def stripe(override_dependency):
    stub = StripeStub()
    override_dependency(get_stripe_service, lambda: StripeService(transport=httpx.MockTransport(stub)))
    return stub


@pytest.fixture
def tickets(override_dependency):
    payloads = []

    def handler(request):
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={"id": 987})

    override_dependency(get_intercom_service, lambda: IntercomService(transport=httpx.MockTransport(handler)))
    return payloads


@pytest.fixture
def funded_user(user, db_run):
    user_id = uuid.UUID(user["id"])

    async def fund(session):
        await session.execute(
            update(User).where(User.id == user_id).values(
                total_earnings=500.0, available_balance=250.0, pending_payments=40.0,
            )
        )

    db_run(fund)
    return user


def _withdraw(client, user, amount, **fields):
    return client.post("/api/earnings/withdrawals", headers=user["headers"], json=dict(fields, amount=amount))


class TestSummary:
    def test_summary_for_new_user(self, client, auth_headers):
        body = client.get("/api/earnings/summary", headers=auth_headers).json()
        assert body["balances"] == {"total_earnings": 0.0, "available_balance": 0.0, "pending_payments": 0.0}
        assert body["recent_payments"] == []
        assert body["withdrawals"] == []

    def test_summary_with_payments(self, client, funded_user, db_run):
        user_id = uuid.UUID(funded_user["id"])

        async def seed(session):
            for amount, platform in ((12.5, "Spotify"), (7.25, "Apple Music")):
                session.add(PaymentHistory(user_id=user_id, amount=amount, platform=platform, status="completed"))

        db_run(seed)
        body = client.get("/api/earnings/summary", headers=funded_user["headers"]).json()
        assert body["balances"]["available_balance"] == 250.0
        assert {p["platform"] for p in body["recent_payments"]} == {"Spotify", "Apple Music"}

        payments = client.get("/api/earnings/payments", headers=funded_user["headers"]).json()
        assert len(payments) == 2

    def test_advances_totals(self, client, user, db_run):
        user_id = uuid.UUID(user["id"])

        async def seed(session):
            session.add(RoyaltyAdvance(
                user_id=user_id, amount=5000.0, advance_date=date(2024, 1, 15), description="Album advance",
                repayments=[{"amount": 1200.0, "date": "2024-03-01"}, {"amount": 800.0, "date": "2024-06-01"}],
            ))
            session.add(RoyaltyAdvance(
                user_id=user_id, amount=2500.0, advance_date=date(2024, 6, 1), repayments=[],
            ))

        db_run(seed)
        body = client.get("/api/earnings/advances", headers=user["headers"]).json()
        assert body["total_advanced"] == 7500.0
        assert body["total_repaid"] == 2000.0
        assert body["total_remaining"] == 5500.0
        # Newest advance first
        assert body["advances"][0]["amount"] == 2500.0
        assert body["advances"][1]["remaining_balance"] == 3000.0


class TestWithdrawalValidation:
    @pytest.mark.parametrize("amount", [0, -5, 250.01])
    def test_invalid_amount(self, client, funded_user, stripe, amount):
        response = _withdraw(client, funded_user, amount, payment_method="paypal", paypal_email="a@b.co")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid withdrawal amount"

    def test_bank_fields_required(self, client, funded_user, stripe):
        response = _withdraw(client, funded_user, 10, payment_method="bank-transfer", routing_number="110000000")
        assert response.status_code == 400
        assert response.json()["detail"] == "Please fill in all bank account fields"

    def test_account_numbers_must_match(self, client, funded_user, stripe):
        response = _withdraw(client, funded_user, 10, **dict(BANK, confirm_account_number="000123456780"))
        assert response.status_code == 400
        assert response.json()["detail"] == "Account numbers do not match"

    def test_paypal_needs_email(self, client, funded_user, stripe):
        response = _withdraw(client, funded_user, 10, payment_method="paypal")
        assert response.json()["detail"] == "Please enter your PayPal email address"

    def test_other_method_needs_details(self, client, funded_user, stripe):
        response = _withdraw(client, funded_user, 10, payment_method="wise")
        assert response.json()["detail"] == "Please enter your account details"


class TestWithdrawals:
    def test_bank_transfer_through_stripe(self, client, funded_user, stripe, tickets):
        response = _withdraw(client, funded_user, 100, **BANK)
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Withdrawal request submitted and is being processed through Stripe!"
        assert body["available_balance"] == 150.0

        withdrawal = body["withdrawal"]
        assert withdrawal["status"] == "processing"
        assert withdrawal["stripe_external_account_id"] == "ba_123"
        assert withdrawal["stripe_payout_id"] == "po_456"
        assert json.loads(withdrawal["account_details"]) == {
            "routingNumber": "110000000", "accountNumber": "000123456789",
        }

        account_form, payout_form = stripe.forms
        assert account_form["external_account[account_holder_name]"] == ["Nova Lights"]
        assert payout_form["amount"] == ["10000"]
        assert payout_form["destination"] == ["ba_123"]

    def test_stripe_failure_falls_back_to_pending(self, client, funded_user, stripe):
        stripe.fail = True
        response = _withdraw(client, funded_user, 100, **BANK)
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Withdrawal request submitted successfully!"
        assert body["withdrawal"]["status"] == "pending"
        assert body["withdrawal"]["stripe_payout_id"] is None
        assert body["available_balance"] == 150.0

    def test_non_json_stripe_reply_falls_back_to_pending(self, client, funded_user, stripe):
        stripe.garbled = True
        response = _withdraw(client, funded_user, 100, **BANK)
        assert response.status_code == 201
        body = response.json()
        assert body["withdrawal"]["status"] == "pending"
        assert body["withdrawal"]["stripe_payout_id"] is None

    def test_paypal(self, client, funded_user, stripe):
        response = _withdraw(client, funded_user, 50, payment_method="paypal", paypal_email="nova@example.com")
        assert response.status_code == 201
        withdrawal = response.json()["withdrawal"]
        assert withdrawal["status"] == "pending"
        assert withdrawal["account_details"] == "nova@example.com"
        assert stripe.forms == []

    def test_check_goes_to_support(self, client, funded_user, stripe, tickets):
        response = _withdraw(client, funded_user, 75, payment_method="check")
        assert response.status_code == 201
        body = response.json()
        assert body["withdrawal"] is None
        assert body["support_ticket_id"] == "987"
        assert body["available_balance"] == 250.0
        assert tickets[0]["subject"] == "Check withdrawal request"
        assert "75" in tickets[0]["body"]
        assert client.get("/api/earnings/withdrawals", headers=funded_user["headers"]).json() == []

    def test_balance_is_spent_once(self, client, funded_user, stripe):
        assert _withdraw(client, funded_user, 200, payment_method="paypal", paypal_email="a@b.co").status_code == 201
        second = _withdraw(client, funded_user, 100, payment_method="paypal", paypal_email="a@b.co")
        assert second.status_code == 400

        withdrawals = client.get("/api/earnings/withdrawals", headers=funded_user["headers"]).json()
        assert len(withdrawals) == 1
        profile = client.get("/api/profile", headers=funded_user["headers"]).json()
        assert profile["available_balance"] == 50.0
