"""
In-memory copy of the admin dataset, kept in step with the object store
through a monotonically increasing version number.

The remote side consists of two objects: the version key (a decimal string)
and the document key (the serialized Document). persist() writes the version
first, then the document. A failed write leaves the local state ahead of the
remote one; the next successful persist brings them back in line.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Literal, Optional

from admin_backend.errors import BlobNotFoundError
from admin_backend.schemas import Document
from admin_backend.storage import BlobStore

logger = logging.getLogger(__name__)

SyncMode = Literal["baseline", "fetch"]


def parse_version(raw: str) -> int:
    """Parse a remote version record, falling back to 0 for unusable payloads."""
    try:
        value = int(raw.strip())
    except (AttributeError, ValueError):
        logger.warning("Unparsable remote version %r, treating as 0", raw)
        return 0
    if value < 0:
        logger.warning("Negative remote version %d, treating as 0", value)
        return 0
    return value


class VersionedDocumentStore:
    def __init__(
        self,
        blob_store: BlobStore,
        baseline_factory: Callable[[], Document],
        *,
        data_key: str = "data/index.json",
        version_key: str = "data/version.json",
        sync_mode: SyncMode = "baseline",
    ):
        self.blob_store = blob_store
        self.data_key = data_key
        self.version_key = version_key
        self.sync_mode = sync_mode
        self.local_version = 0
        self.document: Optional[Document] = None
        self._baseline_factory = baseline_factory
        self._background: set[asyncio.Task] = set()
        # Serializes version/document write pairs across all persist callers.
        self._write_lock = asyncio.Lock()
        # Highest version known to be durably stored remotely.
        self.confirmed_version = 0

    @property
    def loaded(self) -> bool:
        return self.document is not None

    @property
    def has_unconfirmed_writes(self) -> bool:
        """True while a local commit has not yet been acknowledged by the store."""
        return self.local_version > self.confirmed_version

    def baseline(self) -> Document:
        # Always a fresh copy so resets never share state with the seed.
        return self._baseline_factory().model_copy(deep=True)

    async def ensure_loaded(self) -> Document:
        if self.document is None:
            await self.reconcile()
        return self.document

    async def fetch_remote_version(self) -> int:
        return parse_version(await self.blob_store.get(self.version_key))

    async def reconcile(self) -> None:
        """
        Compare the remote version with the local one and reset local state
        when the remote side has moved on or was reset to 0. Transport errors
        propagate.

        Resets are skipped while this process has a commit the store has not
        acknowledged yet, so a read racing the first upload cannot discard it.
        """
        try:
            remote_version = await self.fetch_remote_version()
        except BlobNotFoundError:
            if self.has_unconfirmed_writes:
                logger.info(
                    "No remote version yet, keeping unconfirmed local version %d",
                    self.local_version,
                )
                return
            logger.info(
                "No remote version at %s, initializing store with baseline data",
                self.version_key,
            )
            self.local_version = 0
            self.confirmed_version = 0
            self.document = self.baseline()
            self.schedule_persist()
            return

        if remote_version > self.local_version:
            logger.info(
                "Remote version %d ahead of local %d, resetting document (mode=%s)",
                remote_version,
                self.local_version,
                self.sync_mode,
            )
            self.document = await self._remote_document()
            self.local_version = remote_version
            self.confirmed_version = remote_version
        elif remote_version == 0:
            if self.has_unconfirmed_writes:
                logger.info(
                    "Remote version 0 while local version %d is unconfirmed, keeping local state",
                    self.local_version,
                )
                return
            first_load = self.document is None
            self.document = self.baseline()
            if first_load:
                self.schedule_persist()

    async def _remote_document(self) -> Document:
        if self.sync_mode == "baseline":
            return self.baseline()
        try:
            raw = await self.blob_store.get(self.data_key)
        except BlobNotFoundError:
            logger.warning(
                "Remote version present but %s missing, using baseline data",
                self.data_key,
            )
            return self.baseline()
        return Document.from_json(raw)

    async def persist(self) -> None:
        """
        Upload version then document. Errors propagate; nothing is rolled back.

        The state is captured under the write lock, so every uploaded pair is
        consistent and the last pair written is the newest state.
        """
        async with self._write_lock:
            document = self.document if self.document is not None else self.baseline()
            version = self.local_version
            payload = document.to_json()
            await self.blob_store.put(self.version_key, str(version))
            await self.blob_store.put(self.data_key, payload)
            self.confirmed_version = max(self.confirmed_version, version)
        logger.info("Persisted document at version %d", version)

    def schedule_persist(self) -> asyncio.Task:
        """Fire-and-forget persist; failures are logged."""
        task = asyncio.get_running_loop().create_task(self.persist())
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background persist failed", exc_info=(type(exc), exc, exc.__traceback__)
            )

    async def wait_background(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
