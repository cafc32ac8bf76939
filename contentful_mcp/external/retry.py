from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog

from ..core.context import get_current_context
from .errors import ClassifiedError, ErrorMeta, classify
from .metrics import CONTENT_API_RETRIES


logger = structlog.get_logger(__name__)

# Indirection so tests can observe backoff without sleeping.
_sleep = asyncio.sleep


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 4
    base_delay_ms: float = 100
    max_delay_ms: float = 1600
    jitter_ratio: float = 0.2

    def compute_delay_ms(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (1-based).

        base * 2^(attempt-1), capped at max_delay_ms, then scaled by a
        random factor in [1 - jitter, 1 + jitter] and capped again.
        """
        delay = min(self.base_delay_ms * (2 ** (attempt - 1)), self.max_delay_ms)
        if self.jitter_ratio:
            delay *= random.uniform(1 - self.jitter_ratio, 1 + self.jitter_ratio)
        return max(0.0, min(delay, self.max_delay_ms))


DEFAULT_RETRY_POLICY = RetryPolicy()


async def with_retry(
    operation: Callable[[], Awaitable[Any]],
    policy: RetryPolicy | None = None,
    meta: ErrorMeta | None = None,
) -> Any:
    """Run ``operation`` with exponential backoff on retryable failures.

    - max_attempts includes the first try
    - non-retryable failures are raised after a single attempt
    - the raised error is always the classified form of the last failure
    """
    policy = policy or DEFAULT_RETRY_POLICY
    context = get_current_context()
    log = context.logger if context is not None else logger

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            classified: ClassifiedError = classify(exc, meta)
            if not classified.retryable or attempt >= policy.max_attempts:
                if classified.retryable:
                    log.error(
                        "content_api_retries_exhausted",
                        attempts=attempt,
                        kind=classified.kind,
                        status_code=classified.status_code,
                        action=classified.action,
                    )
                if classified is exc:
                    raise
                raise classified from exc

            delay_ms = policy.compute_delay_ms(attempt)
            CONTENT_API_RETRIES.labels(kind=classified.kind).inc()
            log.warning(
                "content_api_retry",
                attempt=attempt,
                max_attempts=policy.max_attempts,
                kind=classified.kind,
                status_code=classified.status_code,
                delay_ms=round(delay_ms, 1),
                action=classified.action,
            )
            await _sleep(delay_ms / 1000)
