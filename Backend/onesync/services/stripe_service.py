from typing import Any, Dict, Optional
import httpx
import logging

from onesync.core.config import settings
from onesync.core.exceptions import ValidationFailed
from onesync.services.pica import PicaClient, FORM_CONTENT, drop_empty
from onesync.services.streaming import require, unknown_action

logger = logging.getLogger(__name__)

LIST_PAYOUTS = "conn_mod_def::GCmLSbTmkW4::3wzTQK8jTRyi_GeLzPeKQg"
CREATE_PAYOUT = "conn_mod_def::GCmLQxFmO6A::09vMSElPTbuLewGRzzLhpA"
GET_BALANCE = "conn_mod_def::GCmLMcCm3nQ::-fHp-X6BSQeDvHGK2YSI1w"
GET_PAYOUT = "conn_mod_def::GCmLQW9Q5pA::Q2xUaCDKT0ObezUN3cH8HQ"
GET_SUBSCRIPTION = "conn_mod_def::GCmLIl_J0PU"
# The aggregator routes these through the generic Stripe passthrough action
BALANCE_TRANSACTIONS = LIST_PAYOUTS
EXTERNAL_ACCOUNTS = LIST_PAYOUTS


class StripeService:
    """Stripe calls over the aggregator. Request bodies are form-encoded."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client = PicaClient(
            "Stripe", settings.PICA_STRIPE_CONNECTION_KEY, content_type=FORM_CONTENT, transport=transport
        )

    async def list_payouts(
        self,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        created_gte: Optional[int] = None,
        created_lte: Optional[int] = None,
    ) -> Any:
        query = drop_empty({
            "status": status,
            "limit": str(limit or 50),
            "created[gte]": created_gte,
            "created[lte]": created_lte,
        })
        return await self.client.request("GET", "v1/payouts", LIST_PAYOUTS, params=query)

    async def create_payout(
        self,
        amount: int,
        destination: str,
        currency: Optional[str] = None,
        description: Optional[str] = None,
        method: Optional[str] = None,
    ) -> Any:
        if not amount or not destination:
            raise ValidationFailed("Missing required fields: amount, destination")
        form = {
            "amount": str(amount),
            "currency": currency or "usd",
            "destination": destination,
            "description": description or "Payout from OneSync",
            "method": method or "standard",
        }
        return await self.client.request("POST", "v1/payouts", CREATE_PAYOUT, data=form)

    async def get_balance(self) -> Any:
        return await self.client.request("GET", "v1/balance", GET_BALANCE)

    async def get_balance_transactions(
        self, limit: Optional[int] = None, starting_after: Optional[str] = None, type: Optional[str] = None
    ) -> Any:
        query = drop_empty({"limit": limit, "starting_after": starting_after, "type": type})
        return await self.client.request("GET", "v1/balance_transactions", BALANCE_TRANSACTIONS, params=query)

    async def get_payout(self, payout_id: str) -> Any:
        if not payout_id:
            raise ValidationFailed("Missing required field: payoutId")
        return await self.client.request("GET", f"v1/payouts/{payout_id}", GET_PAYOUT)

    async def create_external_account(
        self,
        account_holder_name: str,
        routing_number: str,
        account_number: str,
        country: Optional[str] = None,
        currency: Optional[str] = None,
        account_holder_type: Optional[str] = None,
    ) -> Any:
        if not account_holder_name or not routing_number or not account_number:
            raise ValidationFailed("Missing required fields for bank account")
        form = {
            "external_account[object]": "bank_account",
            "external_account[country]": country or "US",
            "external_account[currency]": currency or "usd",
            "external_account[account_holder_name]": account_holder_name,
            "external_account[account_holder_type]": account_holder_type or "individual",
            "external_account[routing_number]": routing_number,
            "external_account[account_number]": account_number,
        }
        return await self.client.request(
            "POST", "v1/accounts/acct_default/external_accounts", EXTERNAL_ACCOUNTS, data=form
        )

    async def get_subscription(self, subscription_id: str) -> Any:
        if not subscription_id:
            raise ValidationFailed("Subscription ID is required")
        return await self.client.request("GET", f"subscriptions/{subscription_id}", GET_SUBSCRIPTION)

    async def run(self, action: str, params: Dict[str, Any]) -> Any:
        """Dispatch a `{action, ...params}` request from the payout manager."""
        if action == "list_payouts":
            created = params.get("created") or {}
            return await self.list_payouts(
                status=params.get("status"),
                limit=params.get("limit"),
                created_gte=created.get("gte"),
                created_lte=created.get("lte"),
            )
        if action == "create_payout":
            return await self.create_payout(
                amount=params.get("amount"),
                destination=params.get("destination"),
                currency=params.get("currency"),
                description=params.get("description"),
                method=params.get("method"),
            )
        if action == "get_balance":
            return await self.get_balance()
        if action == "get_balance_transactions":
            return await self.get_balance_transactions(
                limit=params.get("limit"),
                starting_after=params.get("starting_after"),
                type=params.get("type"),
            )
        if action == "get_payout":
            return await self.get_payout(require(params, "payoutId"))
        if action == "create_external_account":
            return await self.create_external_account(
                account_holder_name=params.get("account_holder_name"),
                routing_number=params.get("routing_number"),
                account_number=params.get("account_number"),
                country=params.get("country"),
                currency=params.get("currency"),
                account_holder_type=params.get("account_holder_type"),
            )
        raise unknown_action(action)


# Dependency
async def get_stripe_service() -> StripeService:
    return StripeService()
