"""Stripe payment gateway operations used by the booking lifecycle.

Bookings are paid with manual-capture PaymentIntents: the host's
confirmation captures the authorization, a decline voids it, and a
cancellation either voids it (still uncaptured) or refunds a fraction of
the captured amount.

Uses the v8+ StripeClient pattern with the secret key read from SSM.
"""

import os
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from ..models import GatewayFee
from ..utils.logging import get_logger, log_payment_operation
from .ssm_service import SSMServiceError, get_ssm_service

logger = get_logger(__name__)

# Stripe amounts are in the smallest currency unit
MINOR_UNITS = Decimal(100)


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class StripeService:
    """Capture, decline and refund PaymentIntents.

    Usage:
        stripe_svc = get_stripe_service()
        result = stripe_svc.refund_booking("pi_3ABC123", Decimal("0.5"))
    """

    def __init__(self, environment: str | None = None) -> None:
        """Initialize Stripe service with credentials from SSM.

        Args:
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._ssm = get_ssm_service()
        self._client: StripeClient | None = None

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeServiceError: If credentials cannot be retrieved.
        """
        if self._client is None:
            try:
                secret_key = self._ssm.get_parameter(
                    f"/rstays/{self._environment}/stripe/secret_key"
                )
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to initialize Stripe client: {e}") from e
            self._client = StripeClient(secret_key)
            logger.info("Stripe client initialized for environment: %s", self._environment)
        return self._client

    def capture_payment(self, payment_intent_id: str) -> dict[str, Any]:
        """Capture an authorized PaymentIntent and read the gateway fees.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx).

        Returns:
            Dict with:
                - payment_intent_id: Captured intent
                - status: Intent status after capture
                - amount_received: Captured amount in major units
                - fees: List of GatewayFee withheld by Stripe

        Raises:
            StripeServiceError: If the capture fails.
        """
        client = self._get_client()
        try:
            intent = client.payment_intents.capture(
                payment_intent_id,
                params={"expand": ["latest_charge.balance_transaction"]},
            )
            fees = self._charge_fees(client, intent)
        except stripe.StripeError as e:
            raise self._failure("capture_payment", payment_intent_id, e) from e

        log_payment_operation(
            logger,
            "capture_payment",
            payment_intent_id=payment_intent_id,
            status=intent.status,
            fees=sum((f.price for f in fees), Decimal(0)),
        )
        return {
            "payment_intent_id": intent.id,
            "status": intent.status,
            "amount_received": Decimal(intent.amount_received or 0) / MINOR_UNITS,
            "fees": fees,
        }

    def decline_payment(self, payment_intent_id: str) -> dict[str, Any]:
        """Void an uncaptured PaymentIntent.

        Raises:
            StripeServiceError: If Stripe rejects the cancellation.
        """
        client = self._get_client()
        try:
            intent = client.payment_intents.cancel(payment_intent_id)
        except stripe.StripeError as e:
            raise self._failure("decline_payment", payment_intent_id, e) from e

        log_payment_operation(
            logger, "decline_payment", payment_intent_id=payment_intent_id, status=intent.status
        )
        return {"payment_intent_id": intent.id, "status": intent.status}

    def refund_booking(self, payment_intent_id: str, fraction: Decimal) -> dict[str, Any]:
        """Give back ``fraction`` of a booking payment.

        An intent that was never captured is voided instead of refunded.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx).
            fraction: Share of the received amount to refund, 0..1.

        Returns:
            Dict with ``status`` ("canceled" or "refunded"), and for refunds
            ``refund_id`` and ``amount`` in major units. A refund that rounds
            to zero minor units is not sent to Stripe and reports an amount of 0.

        Raises:
            StripeServiceError: If the fraction is out of range or Stripe
                rejects the call.
        """
        fraction = Decimal(fraction)
        if fraction < 0 or fraction > 1:
            raise StripeServiceError("Refund fraction must be between 0 and 1")

        client = self._get_client()
        try:
            intent = client.payment_intents.retrieve(payment_intent_id)
            if intent.status == "requires_capture":
                canceled = client.payment_intents.cancel(payment_intent_id)
                log_payment_operation(
                    logger,
                    "refund_booking",
                    payment_intent_id=payment_intent_id,
                    status=canceled.status,
                )
                return {"status": "canceled", "payment_intent_id": canceled.id}

            amount = int(
                (Decimal(intent.amount_received) * fraction).quantize(
                    Decimal(1), rounding=ROUND_HALF_UP
                )
            )
            if amount <= 0:
                log_payment_operation(
                    logger,
                    "refund_booking",
                    payment_intent_id=payment_intent_id,
                    amount=0,
                    status="skipped",
                )
                return {"status": "refunded", "refund_id": None, "amount": Decimal(0)}

            refund = client.refunds.create(
                params={
                    "payment_intent": payment_intent_id,
                    "amount": amount,
                    "metadata": {"fraction": str(fraction)},
                },
                options={"idempotency_key": f"refund_{payment_intent_id}"},
            )
        except stripe.StripeError as e:
            raise self._failure("refund_booking", payment_intent_id, e) from e

        log_payment_operation(
            logger,
            "refund_booking",
            payment_intent_id=payment_intent_id,
            amount=amount,
            status=refund.status,
        )
        return {
            "status": "refunded",
            "refund_id": refund.id,
            "amount": Decimal(refund.amount) / MINOR_UNITS,
        }

    def _charge_fees(self, client: StripeClient, intent: Any) -> list[GatewayFee]:
        charge = intent.latest_charge
        if not charge:
            return []
        balance_tx = getattr(charge, "balance_transaction", None)
        if isinstance(balance_tx, str):
            balance_tx = client.balance_transactions.retrieve(balance_tx)
        if balance_tx is None:
            return []
        return [
            GatewayFee(name=fee.type, price=Decimal(fee.amount) / MINOR_UNITS)
            for fee in balance_tx.fee_details
        ]

    def _failure(
        self, operation: str, payment_intent_id: str, error: stripe.StripeError
    ) -> StripeServiceError:
        error_code = getattr(error, "code", None)
        log_payment_operation(
            logger,
            operation,
            payment_intent_id=payment_intent_id,
            error=str(error),
            stripe_error_code=error_code,
        )
        return StripeServiceError(
            f"Stripe {operation} failed: {error}", stripe_error_code=error_code
        )


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance."""
    return StripeService()
