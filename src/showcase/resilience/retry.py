"""Retry policy with exponential backoff and jitter for outbound calls."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, Field

from showcase.core.exceptions import ShowcaseError, TelemetryError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class RetryPolicy(BaseModel):
    """Configurable retry policy with exponential backoff.

    Attributes:
        max_retries: Maximum number of retry attempts (0 = no retries).
        backoff_base: Base delay in seconds for exponential backoff.
        backoff_max: Maximum delay in seconds (caps the exponential growth).
        jitter: If ``True``, add random jitter to the backoff delay.
        retryable_exceptions: Tuple of exception types that are eligible for retry.
    """

    max_retries: int = Field(default=3, ge=0, le=20)
    backoff_base: float = Field(default=0.5, ge=0.0)
    backoff_max: float = Field(default=10.0, ge=0.0)
    jitter: bool = True
    retryable_exceptions: tuple[type[Exception], ...] = (TelemetryError,)

    model_config = {"arbitrary_types_allowed": True}

    def _is_retryable(self, exc: Exception) -> bool:
        """Determine whether an exception should be retried.

        A :class:`ShowcaseError` subclass that overrides ``is_retryable``
        decides for itself (``TelemetryError`` for a 4xx response says no).
        Everything else is retried when it is an instance of one of the
        configured ``retryable_exceptions``.
        """
        if isinstance(exc, ShowcaseError):
            for klass in type(exc).__mro__:
                if klass is ShowcaseError:
                    break
                if "is_retryable" in klass.__dict__:
                    return bool(exc.is_retryable)

        return isinstance(exc, self.retryable_exceptions)

    def _compute_delay(self, attempt: int) -> float:
        """Compute the backoff delay for the given attempt (0-indexed).

        ``backoff_base * 2^attempt`` capped at ``backoff_max``; with
        ``jitter`` the delay is uniform between 0 and that value.
        """
        delay: float = min(self.backoff_base * (2 ** attempt), self.backoff_max)
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay

    async def execute(
        self,
        fn: Callable[..., Awaitable[_T]],
        *args: Any,
        **kwargs: Any,
    ) -> _T:
        """Execute *fn* with retry logic.

        Calls ``await fn(*args, **kwargs)`` and retries on retryable
        exceptions up to ``max_retries`` times with exponential backoff.

        Raises:
            Exception: The last exception raised by *fn* if all retries are
                exhausted, or immediately if the exception is not retryable.
        """
        last_exc: Exception | None = None

        for attempt in range(1 + self.max_retries):
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                last_exc = exc

                if not self._is_retryable(exc):
                    raise

                if attempt >= self.max_retries:
                    logger.warning(
                        "Retry exhausted after %d attempt(s): %s",
                        attempt + 1,
                        exc,
                    )
                    raise

                delay = self._compute_delay(attempt)
                logger.info(
                    "Retry attempt %d/%d after %.2fs: %s",
                    attempt + 1,
                    self.max_retries,
                    delay,
                    exc,
                )
                await asyncio.sleep(delay)

        assert last_exc is not None  # noqa: S101
        raise last_exc
