from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Optional

from app.config import Settings
from app.core.models import Cart, PaymentResult
from .exceptions import ValidationError
from .faults import FaultInjector

log = logging.getLogger("app.payments")

DECLINED = "Payment could not be processed. Please check the card details."
INSUFFICIENT_FUNDS = "Insufficient funds."


class SimulatedPaymentGateway:
    """
    Stand-in for a payment provider. Declines are returned as values, never raised;
    only the simulated network layer raises (TransientError).
    """

    def __init__(self, settings: Settings, faults: Optional[FaultInjector] = None,
                 rng: Optional[random.Random] = None):
        self.decline_rate = settings.payment_decline_rate
        self.insufficient_funds_rate = settings.payment_insufficient_funds_rate
        self._faults = faults or FaultInjector(settings)
        self._rng = rng or random.Random()

    def process(self, cart: Cart) -> PaymentResult:
        if not cart.items:
            raise ValidationError("Cannot pay for an empty cart", code="EMPTY_CART")
        self._faults.check("process_payment")

        if self.decline_rate and self._rng.random() < self.decline_rate:
            log.info("payment declined for total=%s", cart.total)
            return PaymentResult(success=False, error=DECLINED)
        if self.insufficient_funds_rate and self._rng.random() < self.insufficient_funds_rate:
            log.info("payment refused (funds) for total=%s", cart.total)
            return PaymentResult(success=False, error=INSUFFICIENT_FUNDS)

        txn = f"TXN-{datetime.utcnow().strftime('%Y%m%d%H%M%S%f')}"
        return PaymentResult(success=True, transaction_id=txn)
