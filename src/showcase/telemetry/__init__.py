from showcase.telemetry.cache import TelemetryCache, get_preceding_upgrade
from showcase.telemetry.client import TelemetryClient

__all__ = ["TelemetryCache", "TelemetryClient", "get_preceding_upgrade"]
