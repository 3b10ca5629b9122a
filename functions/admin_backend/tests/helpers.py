"""
Shared fixtures for admin backend tests.
"""

from __future__ import annotations

import asyncio

from admin_backend.document_store import VersionedDocumentStore
from admin_backend.errors import BlobTransportError
from admin_backend.mutation_queue import MutationQueue
from admin_backend.schemas import Document
from admin_backend.storage import InMemoryBlobStore

DATA_KEY = "data/index.json"
VERSION_KEY = "data/version.json"

SEED = Document(
    people=[{"id": "p-seed", "name": "Seed"}],
    questions=[],
    items=[],
)


class GatedBlobStore(InMemoryBlobStore):
    """Blocks every put until the gate opens, to hold a transaction in flight."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gate = asyncio.Event()
        self.gate.set()

    async def put(self, key: str, value: str) -> None:
        await self.gate.wait()
        await super().put(key, value)


def fail_on(operation: str, key: str | None = None):
    def hook(op: str, k: str) -> None:
        if op == operation and (key is None or k == key):
            raise BlobTransportError(f"simulated {op} failure for {k}")

    return hook


def make_store(blob_store=None, *, sync_mode="baseline") -> VersionedDocumentStore:
    return VersionedDocumentStore(
        blob_store if blob_store is not None else InMemoryBlobStore(),
        lambda: SEED,
        data_key=DATA_KEY,
        version_key=VERSION_KEY,
        sync_mode=sync_mode,
    )


def make_queue(store: VersionedDocumentStore, **kwargs) -> MutationQueue:
    return MutationQueue(store, **kwargs)


async def settle() -> None:
    """Let scheduled background tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)
