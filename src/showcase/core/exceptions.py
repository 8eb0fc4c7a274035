from __future__ import annotations

from typing import Any


class ShowcaseError(Exception):
    """Base exception for all showcase build errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"OUTPUT_DIR"``).
        details: Arbitrary key/value context about the error.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        """Whether the operation that raised this error can be retried."""
        return False


class ConfigurationError(ShowcaseError): ...


class PresetError(ConfigurationError): ...


class BuilderError(ShowcaseError): ...


class IndexingError(ShowcaseError): ...


class StaticDirError(ShowcaseError): ...


class OutputDirError(ConfigurationError):
    """The requested output directory is unsafe to clean.

    Raised for the empty string and for paths resolving to the filesystem
    root, always before the filesystem is touched.
    """


class EffectError(ShowcaseError):
    """A side-effect task failed.

    ``kind`` names the task (``"static-copy"``, ``"index-export"``, ...).
    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, kind: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.kind = kind


class TelemetryError(ShowcaseError):
    """Telemetry submission failed.

    Retryable when the failure is transport-level or a 5xx response;
    a rejected payload (4xx) is final.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(message, code="TELEMETRY")
        self.status_code = status_code
        self._retryable = retryable

    @property
    def is_retryable(self) -> bool:  # noqa: D102
        return self._retryable
