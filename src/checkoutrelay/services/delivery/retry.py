from __future__ import annotations

import asyncio
import logging
import random

from checkoutrelay.core.errors import DeliveryExhausted, TransientSinkError
from checkoutrelay.services.delivery.base import DownstreamSink
from checkoutrelay.services.records import NormalizedRecord

logger = logging.getLogger(__name__)


class RetryingSink:
    """
    Wraps a sink with a per-attempt timeout and bounded retries.

    - timeout / TransientSinkError: backoff then retry, up to max_attempts
    - PermanentSinkError (or anything else): propagate immediately
    - cap reached: DeliveryExhausted
    """

    def __init__(
        self,
        inner: DownstreamSink,
        *,
        max_attempts: int = 3,
        timeout_sec: float = 10.0,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.3,
    ) -> None:
        self.inner = inner
        self.name = inner.name
        self.max_attempts = max(1, max_attempts)
        self.timeout_sec = timeout_sec
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter

    def accepts(self, kind: str) -> bool:
        return self.inner.accepts(kind)

    def _delay(self, attempt: int) -> float:
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return max(0.0, delay + random.uniform(0, delay * self.jitter))

    async def deliver(self, record: NormalizedRecord) -> None:
        last_reason = ""

        for attempt in range(1, self.max_attempts + 1):
            try:
                await asyncio.wait_for(self.inner.deliver(record), timeout=self.timeout_sec)
                return
            except asyncio.TimeoutError:
                last_reason = f"timed out after {self.timeout_sec}s"
            except TransientSinkError as e:
                last_reason = e.reason

            if attempt == self.max_attempts:
                break

            sleep_s = self._delay(attempt)
            logger.warning(
                "Retry %d/%d for %s (%s), waiting %.1fs",
                attempt,
                self.max_attempts - 1,
                self.name,
                last_reason,
                sleep_s,
            )
            await asyncio.sleep(sleep_s)

        raise DeliveryExhausted(self.name, self.max_attempts, last_reason)
