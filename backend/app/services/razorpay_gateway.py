"""RazorpayGateway encapsulates all Razorpay interactions.
Reads configuration from ConfigService; the SDK is blocking and runs under the payment timeout.
"""

from __future__ import annotations

from typing import Any

import razorpay

from common.core.app_error import Errors
from common.core.config_service import ConfigService
from common.core.upstream import call_upstream
from common.utils.utils import get_logger

logger = get_logger()


class RazorpayGateway:
    provider = "razorpay"

    def __init__(self, config: ConfigService) -> None:
        self.key_id = config.payments.key_id
        self._key_secret = config.payments.key_secret
        self.currency = config.payments.currency
        self.timeout_seconds = config.timeouts.payment_seconds
        self._client: razorpay.Client | None = None

    def _ensure_client(self) -> razorpay.Client:
        if self._client is None:
            if not (self.key_id and self._key_secret):
                logger.error("Razorpay keys are missing in configuration")
                raise Errors.Generic.NOT_CONFIGURED.create(message="Payment provider is not configured")
            self._client = razorpay.Client(auth=(self.key_id, self._key_secret))
        return self._client

    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict[str, str]) -> dict[str, Any]:
        """Create a provider order for ``amount`` minor units. Returns the raw order object (``id`` is the order reference)."""
        client = self._ensure_client()
        data = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}

        order: dict[str, Any] = await call_upstream("razorpay", client.order.create, data=data, timeout=self.timeout_seconds)
        logger.info("Created Razorpay order", order_id=order.get("id"), amount=amount, currency=currency)
        return order
