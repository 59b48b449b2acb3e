# storefront/services/payment_client.py
from dataclasses import dataclass

import stripe

from storefront.domain.errors import PaymentGatewayFailure
from storefront.utils.retry import gateway_retry
from storefront.utils.settings import STRIPE_SECRET_KEY, PAYMENT_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str


class PaymentClient:
    """
    Thin adapter over Stripe PaymentIntents.

    The gateway is a black box: any failure after retries is reported as
    PaymentGatewayFailure and the Stripe detail only goes to the log.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: int = PAYMENT_TIMEOUT_SECONDS,
        client: stripe.StripeClient | None = None,
    ):
        self.timeout = timeout
        # retries are ours (tenacity), so the SDK must not retry on its own
        self.client = client or stripe.StripeClient(
            api_key or STRIPE_SECRET_KEY,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=0,
        )

    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        description: str,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        if amount_minor_units <= 0:
            raise ValueError("payment amount must be positive")

        try:
            intent = self._create(amount_minor_units, currency, description, idempotency_key)
        except stripe.StripeError as e:
            logger.error(
                f"Stripe PaymentIntent create failed for {amount_minor_units} {currency}: "
                f"{type(e).__name__}: {e}"
            )
            raise PaymentGatewayFailure("payment gateway failed to create intent") from e

        logger.info(f"PaymentIntent {intent.id} created for {amount_minor_units} {currency}")
        return PaymentIntent(id=intent.id, client_secret=intent.client_secret)

    @gateway_retry()
    def _create(self, amount, currency, description, idempotency_key):
        options = {"idempotency_key": idempotency_key} if idempotency_key else {}
        return self.client.payment_intents.create(
            params={
                "amount": amount,
                "currency": currency,
                "description": description,
                "automatic_payment_methods": {"enabled": True},
            },
            options=options,
        )
