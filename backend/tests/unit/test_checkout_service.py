"""
积分购买服务单元测试
Stripe SDK调用全部以mock替代
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import stripe

from draw2real.core.config import settings
from draw2real.core.security import CurrentUser
from draw2real.models.credit import CreditKind
from draw2real.services.payments.checkout_service import (
    CREDIT_PACKAGES,
    CheckoutError,
    CheckoutService,
    InvalidWebhookError,
    PaymentsNotConfiguredError,
    resolve_return_origin,
)

BUYER = CurrentUser(id="buyer-1", email="buyer@example.com")
REFERRER_ID = "referrer-1"
SESSION_ID = "cs_test_123"


def _session(user_id=BUYER.id, payment_status="paid", package="price_5", session_id=SESSION_ID):
    return {
        "id": session_id,
        "url": "https://checkout.stripe.com/c/pay/" + session_id,
        "payment_status": payment_status,
        "metadata": {"user_id": user_id, "credits": "50", "package_type": package},
    }


def _event(session, event_type="checkout.session.completed"):
    return {"type": event_type, "data": {"object": session}}


@pytest.fixture
def checkout(ledger, referrals):
    return CheckoutService(ledger, referrals, api_key="sk_test_key", webhook_secret="whsec_test")


@pytest.mark.unit
@pytest.mark.payments
class TestCheckoutService:
    """积分购买测试"""

    def test_packages(self):
        packages = CheckoutService.list_packages()

        assert [p.price_id for p in packages] == ["price_1", "price_5", "price_10", "price_20"]
        assert CREDIT_PACKAGES["price_10"].credits == 100
        assert CREDIT_PACKAGES["price_10"].amount == 1000

    @pytest.mark.asyncio
    async def test_create_checkout_builds_session(self, checkout):
        with patch("stripe.Customer.list", return_value={"data": []}) as customer_list, \
                patch("stripe.checkout.Session.create", return_value=_session()) as create:
            result = await checkout.create_checkout(BUYER, "price_5", "https://draw.example.com/")

        assert result == {"url": _session()["url"], "session_id": SESSION_ID}
        customer_list.assert_called_once_with(api_key="sk_test_key", email=BUYER.email, limit=1)

        kwargs = create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_key"
        assert kwargs["customer"] is None
        assert kwargs["customer_email"] == BUYER.email
        assert kwargs["mode"] == "payment"
        assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 500
        assert kwargs["success_url"] == (
            "https://draw.example.com/payment-success?credits=50&session_id={CHECKOUT_SESSION_ID}"
        )
        assert kwargs["cancel_url"] == "https://draw.example.com/premium"
        assert kwargs["metadata"] == {"user_id": BUYER.id, "credits": "50", "package_type": "price_5"}

    @pytest.mark.asyncio
    async def test_create_checkout_reuses_customer(self, checkout):
        with patch("stripe.Customer.list", return_value={"data": [{"id": "cus_1"}]}), \
                patch("stripe.checkout.Session.create", return_value=_session()) as create:
            await checkout.create_checkout(BUYER, "price_1", "https://draw.example.com")

        assert create.call_args.kwargs["customer"] == "cus_1"
        assert create.call_args.kwargs["customer_email"] is None

    @pytest.mark.asyncio
    async def test_unknown_package_is_rejected(self, checkout):
        with pytest.raises(CheckoutError):
            await checkout.create_checkout(BUYER, "price_999", "https://draw.example.com")

    @pytest.mark.asyncio
    async def test_stripe_failure_becomes_checkout_error(self, checkout):
        with patch("stripe.Customer.list", side_effect=stripe.APIConnectionError("down")):
            with pytest.raises(CheckoutError):
                await checkout.create_checkout(BUYER, "price_1", "https://draw.example.com")

    @pytest.mark.asyncio
    async def test_not_configured(self, ledger, referrals):
        service = CheckoutService(ledger, referrals, api_key="", webhook_secret="")

        with pytest.raises(PaymentsNotConfiguredError):
            await service.create_checkout(BUYER, "price_1", "https://draw.example.com")
        with pytest.raises(PaymentsNotConfiguredError):
            await service.handle_webhook(b"{}", "sig")

    @pytest.mark.asyncio
    async def test_confirm_grants_once(self, checkout, ledger):
        with patch("stripe.checkout.Session.retrieve", return_value=_session()) as retrieve:
            first = await checkout.confirm_checkout(BUYER, SESSION_ID)
            second = await checkout.confirm_checkout(BUYER, SESSION_ID)

        retrieve.assert_called_with(api_key="sk_test_key", id=SESSION_ID)
        assert first.granted is True
        assert first.credits == 50
        assert second.granted is False
        assert await ledger.get_balance(BUYER.id) == 50

        transactions = await ledger.list_transactions(BUYER.id)
        assert len(transactions) == 1
        assert transactions[0].kind == CreditKind.PURCHASE
        assert transactions[0].description == "Purchased 50 Credits - £5"

    @pytest.mark.asyncio
    async def test_confirm_then_webhook_grants_once(self, checkout, ledger):
        with patch("stripe.checkout.Session.retrieve", return_value=_session()):
            await checkout.confirm_checkout(BUYER, SESSION_ID)
        with patch("stripe.Webhook.construct_event", return_value=_event(_session())):
            grant = await checkout.handle_webhook(b"{}", "t=1,v1=abc")

        assert grant.granted is False
        assert await ledger.get_balance(BUYER.id) == 50

    @pytest.mark.asyncio
    async def test_confirm_rejects_other_users_session(self, checkout, ledger):
        with patch("stripe.checkout.Session.retrieve", return_value=_session(user_id="someone-else")):
            with pytest.raises(CheckoutError):
                await checkout.confirm_checkout(BUYER, SESSION_ID)

        assert await ledger.get_balance(BUYER.id) == 0

    @pytest.mark.asyncio
    async def test_confirm_rejects_unpaid_session(self, checkout, ledger):
        with patch("stripe.checkout.Session.retrieve", return_value=_session(payment_status="unpaid")):
            with pytest.raises(CheckoutError):
                await checkout.confirm_checkout(BUYER, SESSION_ID)

        assert await ledger.get_balance(BUYER.id) == 0

    @pytest.mark.asyncio
    async def test_first_purchase_rewards_referrer_once(self, checkout, ledger, referrals):
        code = await referrals.get_or_create_code(REFERRER_ID)
        await referrals.register_referral(BUYER.id, code)

        with patch("stripe.checkout.Session.retrieve", return_value=_session()):
            await checkout.confirm_checkout(BUYER, SESSION_ID)
        second = _session(session_id="cs_test_456", package="price_1")
        with patch("stripe.Webhook.construct_event", return_value=_event(second)):
            await checkout.handle_webhook(b"{}", "t=1,v1=abc")

        assert await ledger.get_balance(BUYER.id) == 60
        assert await ledger.get_balance(REFERRER_ID) == 5

    @pytest.mark.asyncio
    async def test_referral_failure_does_not_block_purchase(self, checkout, ledger):
        checkout.referrals = MagicMock()
        checkout.referrals.reward_referrer = AsyncMock(side_effect=RuntimeError("referral store down"))

        with patch("stripe.checkout.Session.retrieve", return_value=_session()):
            grant = await checkout.confirm_checkout(BUYER, SESSION_ID)

        assert grant.granted is True
        assert await ledger.get_balance(BUYER.id) == 50

    @pytest.mark.asyncio
    async def test_webhook_invalid_signature(self, checkout):
        error = stripe.SignatureVerificationError("No signatures found", "bad-header")

        with patch("stripe.Webhook.construct_event", side_effect=error):
            with pytest.raises(InvalidWebhookError):
                await checkout.handle_webhook(b"{}", "bad-header")

    @pytest.mark.asyncio
    async def test_webhook_invalid_payload(self, checkout):
        with patch("stripe.Webhook.construct_event", side_effect=ValueError("bad json")):
            with pytest.raises(InvalidWebhookError):
                await checkout.handle_webhook(b"not json", "t=1,v1=abc")

    @pytest.mark.asyncio
    async def test_webhook_ignores_other_events(self, checkout, ledger):
        with patch("stripe.Webhook.construct_event", return_value=_event(_session(), "payment_intent.created")):
            assert await checkout.handle_webhook(b"{}", "t=1,v1=abc") is None

        with patch("stripe.Webhook.construct_event", return_value=_event(_session(payment_status="unpaid"))):
            assert await checkout.handle_webhook(b"{}", "t=1,v1=abc") is None

        assert await ledger.get_balance(BUYER.id) == 0


@pytest.mark.unit
@pytest.mark.payments
class TestReturnOrigin:
    """支付跳转站点选择测试"""

    ALLOWED = ["https://draw.example.com", "http://localhost:5173"]

    def test_allowed_origin_is_used(self):
        origin = resolve_return_origin(
            "https://draw.example.com/", allowed=self.ALLOWED, default="http://localhost:5173"
        )

        assert origin == "https://draw.example.com"

    def test_unknown_origin_falls_back_to_default(self):
        origin = resolve_return_origin(
            "https://evil.example.com", allowed=self.ALLOWED, default="http://localhost:5173"
        )

        assert origin == "http://localhost:5173"

    def test_first_allowed_candidate_wins(self):
        origin = resolve_return_origin(
            None, "https://evil.example.com", "http://localhost:5173",
            allowed=self.ALLOWED, default="https://draw.example.com"
        )

        assert origin == "http://localhost:5173"

    def test_defaults_come_from_settings(self):
        assert resolve_return_origin(None) == settings.frontend_url.rstrip("/")
        assert resolve_return_origin(settings.cors_origins[0]) == settings.cors_origins[0].rstrip("/")
