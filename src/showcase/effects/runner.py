from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

from showcase.core.constants import Criticality, EffectKind
from showcase.core.exceptions import EffectError, ShowcaseError
from showcase.effects.models import EffectOutcome, SideEffectTask

logger = structlog.get_logger(__name__)


class EffectSet:
    """Append-only queue of side-effect tasks, drained in batches.

    Every task added is run by exactly one :meth:`join`. A join runs its
    batch concurrently and waits for *all* tasks to settle before deciding
    the result, so no task is left running in the background when a
    failure is reported. Completion order within a batch is unspecified.
    """

    def __init__(self) -> None:
        self._pending: list[SideEffectTask] = []
        self._outcomes: list[EffectOutcome] = []

    def __repr__(self) -> str:
        return f"EffectSet(pending={len(self._pending)}, done={len(self._outcomes)})"

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending_kinds(self) -> list[EffectKind]:
        return [task.kind for task in self._pending]

    @property
    def outcomes(self) -> list[EffectOutcome]:
        return list(self._outcomes)

    def add(
        self,
        kind: EffectKind,
        action: Callable[[], Awaitable[Any]],
        criticality: Criticality = Criticality.FATAL,
    ) -> SideEffectTask:
        task = SideEffectTask(kind=kind, action=action, criticality=criticality)
        self._pending.append(task)
        return task

    async def join(self, *leading: SideEffectTask) -> list[EffectOutcome]:
        """Run *leading* tasks plus everything pending, concurrently.

        *leading* tasks are not queued; they take part in this batch only and
        rank first when choosing which failure to raise.

        Raises:
            Exception: The first fatal failure in batch order. Failures that
                are not :class:`ShowcaseError` are wrapped in
                :class:`EffectError`.
        """
        batch = [*leading, *self._pending]
        self._pending.clear()
        if not batch:
            return []

        results = await asyncio.gather(
            *(self._run(task) for task in batch), return_exceptions=True
        )

        outcomes: list[EffectOutcome] = []
        first_fatal: Exception | None = None
        for task, result in zip(batch, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            error = result if isinstance(result, Exception) else None
            outcomes.append(EffectOutcome(task.kind, task.criticality, error))
            if error is None:
                continue
            if task.criticality is Criticality.BEST_EFFORT:
                logger.warning("side effect failed", kind=task.kind, error=str(error))
            elif first_fatal is None:
                first_fatal = self._as_fatal(task, error)
            else:
                logger.error("additional side effect failure", kind=task.kind, error=str(error))

        self._outcomes.extend(outcomes)
        if first_fatal is not None:
            raise first_fatal
        return outcomes

    @staticmethod
    async def _run(task: SideEffectTask) -> Any:
        return await task.action()

    @staticmethod
    def _as_fatal(task: SideEffectTask, error: Exception) -> Exception:
        if isinstance(error, ShowcaseError):
            return error
        wrapped = EffectError(f"{task.kind} failed: {error}", kind=str(task.kind))
        wrapped.__cause__ = error
        return wrapped
