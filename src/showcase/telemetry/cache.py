"""On-disk record of the last telemetry event of each type."""
from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_CACHE_FILE = "telemetry.json"
# Event types that count as "something happened after the upgrade".
_ACTION_EVENTS = ("init", "upgrade", "build", "dev", "error")


class TelemetryCache:
    """JSON file under *cache_dir* keyed by event type."""

    def __init__(self, cache_dir: str | Path) -> None:
        self._path = Path(cache_dir) / _CACHE_FILE

    def __repr__(self) -> str:
        return f"TelemetryCache(path={str(self._path)!r})"

    def _read_sync(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.debug("telemetry cache unreadable", path=str(self._path))
            return {}
        return data if isinstance(data, dict) else {}

    def _write_sync(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, sort_keys=True), encoding="utf-8")

    async def last_events(self) -> dict[str, Any]:
        data = await asyncio.to_thread(self._read_sync)
        return dict(data.get("last_events") or {})

    async def record(self, event_type: str, body: dict[str, Any]) -> None:
        data = await asyncio.to_thread(self._read_sync)
        events = dict(data.get("last_events") or {})
        events[event_type] = {"timestamp": int(time.time() * 1000), "body": body}
        data["last_events"] = events
        await asyncio.to_thread(self._write_sync, data)


async def get_preceding_upgrade(cache: TelemetryCache) -> dict[str, Any] | None:
    """Return the last upgrade event if nothing else has happened since.

    The first build after an upgrade reports which upgrade preceded it;
    later builds report nothing.
    """
    events = await cache.last_events()
    upgrade = events.get("upgrade")
    if not upgrade:
        return None
    upgraded_at = upgrade.get("timestamp", 0)
    for name in _ACTION_EVENTS:
        if name != "upgrade" and events.get(name, {}).get("timestamp", 0) > upgraded_at:
            return None
    body = (upgrade.get("body") or {}).get("payload") or {}
    return {
        "timestamp": upgrade.get("timestamp"),
        "event_type": "upgrade",
        **{key: body[key] for key in ("from_version", "to_version") if key in body},
    }
