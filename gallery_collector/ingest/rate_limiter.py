"""Fixed-interval request pacing."""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class RequestPacer:
    """Enforces a minimum interval between consecutive requests.

    The first request goes out immediately; every later one waits until
    ``delay_seconds`` have passed since the previous request started.
    """

    def __init__(self, delay_seconds: float = 0.25):
        self.delay_seconds = max(0.0, delay_seconds)
        self._lock = asyncio.Lock()
        self._last_request: float | None = None
        self.requests = 0

    async def wait(self) -> None:
        async with self._lock:
            now = time.monotonic()
            if self._last_request is not None:
                wait_needed = self.delay_seconds - (now - self._last_request)
                if wait_needed > 0:
                    await asyncio.sleep(wait_needed)
            self._last_request = time.monotonic()
            self.requests += 1
