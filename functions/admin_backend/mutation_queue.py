"""
Serialized writes against the versioned document.

A mutation is a plain function that edits the Document in place. At most one
transaction (apply + version bump + persist) is in flight at a time; mutations
submitted meanwhile are queued and committed in FIFO order by the drain loop.

The transaction flag is cooperative: it is only safe because everything runs
on one asyncio event loop and mutations are applied between await points.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Optional

from admin_backend.document_store import VersionedDocumentStore
from admin_backend.schemas import Document

logger = logging.getLogger(__name__)

Mutation = Callable[[Document], None]


class MutationQueue:
    def __init__(
        self,
        store: VersionedDocumentStore,
        *,
        interval_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self.transaction_flag = False
        self.pending: deque[Mutation] = deque()
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        # Set when a drained batch is in memory but its persist failed.
        self._dirty = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def apply(self, mutation: Mutation) -> bool:
        """
        Run mutation as its own transaction, or queue it if one is in flight.
        Returns True when committed here, False when queued for the drain loop.
        """
        if self.transaction_flag:
            self.pending.append(mutation)
            return False

        self.transaction_flag = True
        try:
            document = await self.store.ensure_loaded()
            mutation(document)
            self.store.local_version += 1
            await self.store.persist()
        finally:
            self.transaction_flag = False
        return True

    async def drain(self) -> int:
        """
        Apply every queued mutation as one batch and persist once.
        Returns the number of mutations applied.
        """
        if self.transaction_flag or not (self.pending or self._dirty):
            return 0

        self.transaction_flag = True
        applied = 0
        try:
            document = await self.store.ensure_loaded()
            while self.pending:
                mutation = self.pending.popleft()
                mutation(document)
                applied += 1
            if applied:
                self.store.local_version += 1
            self._dirty = True
            await self.store.persist()
            self._dirty = False
        finally:
            self.transaction_flag = False
        if applied:
            logger.info(
                "Drained %d queued mutations at version %d",
                applied,
                self.store.local_version,
            )
        return applied

    async def _run(self) -> None:
        while True:
            try:
                await self.drain()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Failed to drain mutation queue, retrying next tick")
            await self._sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Started drain loop (interval=%.2fs)", self.interval_seconds)

    async def stop(self, *, flush: bool = True) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if flush and (self.pending or self._dirty):
            try:
                await self.drain()
            except Exception:
                logger.exception(
                    "Final drain failed with %d mutations pending", len(self.pending)
                )
        logger.info("Stopped drain loop")
