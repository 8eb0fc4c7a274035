from __future__ import annotations

import asyncio
from typing import Any

from showcase.core.exceptions import IndexingError
from showcase.indexing.generator import StoryIndexGenerator


async def _initialized(generator: StoryIndexGenerator) -> StoryIndexGenerator:
    await generator.initialize()
    return generator


class IndexHandle:
    """A content index that is either absent or initializing in the background.

    Initialization starts once, when the handle is created with
    :meth:`initialize`; every consumer awaits the same task, so the scan is
    never repeated. An absent handle (preview build skipped) answers
    ``None`` from :meth:`get_index` without raising.
    """

    def __init__(self, task: asyncio.Future[StoryIndexGenerator] | None) -> None:
        self._task = task

    def __repr__(self) -> str:
        state = "absent" if self._task is None else ("done" if self._task.done() else "pending")
        return f"IndexHandle({state})"

    @classmethod
    def absent(cls) -> IndexHandle:
        return cls(None)

    @classmethod
    def initialize(cls, generator: StoryIndexGenerator) -> IndexHandle:
        """Start initializing *generator* and return a handle to the result.

        Must be called from within a running event loop.
        """
        return cls(asyncio.ensure_future(_initialized(generator)))

    @property
    def present(self) -> bool:
        return self._task is not None

    async def generator(self) -> StoryIndexGenerator:
        """Wait for initialization and return the generator.

        Raises:
            IndexingError: If the handle is absent.
        """
        if self._task is None:
            raise IndexingError("No content index: preview build is disabled")
        return await asyncio.shield(self._task)

    async def get_index(self) -> dict[str, Any] | None:
        if self._task is None:
            return None
        generator = await self.generator()
        return await generator.get_index()
