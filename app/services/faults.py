from __future__ import annotations

import logging
import random
import time
from typing import Optional

from app.config import Settings
from .exceptions import TransientError

log = logging.getLogger("app.faults")


class FaultInjector:
    """
    Simulated network behaviour for the mock backend: optional latency and a
    probability of failing with TransientError. Both default to off.
    """

    def __init__(self, settings: Settings, rng: Optional[random.Random] = None):
        self.error_rate = settings.fault_error_rate
        self.latency_s = settings.fault_latency_ms / 1000.0
        self._rng = rng or random.Random()

    def check(self, operation: str) -> None:
        if self.latency_s:
            time.sleep(self.latency_s)
        if self.error_rate and self._rng.random() < self.error_rate:
            log.info("injected transient failure in %s", operation)
            raise TransientError(f"{operation} failed (simulated network error)", code=f"{operation.upper()}_FAILED")
