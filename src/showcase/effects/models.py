"""Side-effect task descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from showcase.core.constants import Criticality, EffectKind


@dataclass(frozen=True)
class SideEffectTask:
    """A deferred unit of work queued during a build.

    ``action`` is called once, when the task's batch is joined. A ``FATAL``
    task's failure fails the batch; a ``BEST_EFFORT`` failure is logged.
    """

    kind: EffectKind
    action: Callable[[], Awaitable[Any]]
    criticality: Criticality = Criticality.FATAL


@dataclass(frozen=True)
class EffectOutcome:
    kind: EffectKind
    criticality: Criticality
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
