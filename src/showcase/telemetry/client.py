from __future__ import annotations

import hashlib
import platform
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from showcase.__version__ import __version__
from showcase.core.config import Settings
from showcase.core.exceptions import TelemetryError
from showcase.resilience.retry import RetryPolicy
from showcase.telemetry.cache import TelemetryCache

logger = structlog.get_logger(__name__)


class TelemetryClient:
    """Posts anonymous usage events as JSON.

    Args:
        url: Event collector endpoint.
        disabled: When ``True``, :meth:`send` returns without any network I/O.
        cache: Optional cache recording the last event of each type.
        retry_policy: Retry policy for transport errors and 5xx responses.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        *,
        disabled: bool = False,
        cache: TelemetryCache | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._disabled = disabled
        self._cache = cache
        self._retry = retry_policy or RetryPolicy(max_retries=2)
        self._transport = transport
        self._timeout = timeout
        self._session_id = uuid.uuid4().hex

    def __repr__(self) -> str:
        return f"TelemetryClient(url={self._url!r}, disabled={self._disabled})"

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryClient:
        return cls(
            settings.telemetry_url,
            disabled=settings.disable_telemetry,
            cache=TelemetryCache(settings.cache_dir),
        )

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def cache(self) -> TelemetryCache | None:
        return self._cache

    def _body(self, event_type: str, payload: dict[str, Any], config_dir: str | None) -> dict[str, Any]:
        context: dict[str, Any] = {
            "showcase_version": __version__,
            "python_version": platform.python_version(),
            "platform": platform.system(),
        }
        if config_dir:
            # Only a hash of the location leaves the machine
            context["project_id"] = hashlib.sha256(config_dir.encode()).hexdigest()[:16]
        return {
            "event_type": event_type,
            "event_id": uuid.uuid4().hex,
            "session_id": self._session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "context": context,
            "payload": payload,
        }

    async def _post(self, body: dict[str, Any]) -> None:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                response = await client.post(self._url, json=body)
            except httpx.HTTPError as exc:
                raise TelemetryError(f"Telemetry request failed: {exc}") from exc
        if response.status_code >= 500:  # noqa: PLR2004
            raise TelemetryError(
                f"Telemetry endpoint returned {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:  # noqa: PLR2004
            raise TelemetryError(
                f"Telemetry event rejected with {response.status_code}",
                status_code=response.status_code,
                retryable=False,
            )

    async def send(
        self,
        event_type: str,
        payload: dict[str, Any],
        *,
        config_dir: str | None = None,
    ) -> bool:
        """Submit one event.

        Returns:
            ``True`` if the event was delivered, ``False`` if telemetry is
            disabled.

        Raises:
            TelemetryError: If delivery failed after retries.
        """
        if self._disabled:
            logger.debug("telemetry disabled, event dropped", event_type=event_type)
            return False

        body = self._body(event_type, payload, config_dir)
        await self._retry.execute(self._post, body)
        if self._cache is not None:
            await self._cache.record(event_type, {"payload": payload})
        logger.debug("telemetry event sent", event_type=event_type)
        return True
