"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from admin_backend.config import get_settings
from admin_backend.document_store import VersionedDocumentStore
from admin_backend.mutation_queue import MutationQueue
from admin_backend.resources import Collections
from admin_backend.schemas import Document, load_baseline
from admin_backend.storage import BlobStore, InMemoryBlobStore, S3BlobStore

_blob_store: BlobStore | None = None
_document_store: VersionedDocumentStore | None = None
_mutation_queue: MutationQueue | None = None
_collections: Collections | None = None


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store:
        return _blob_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _blob_store = InMemoryBlobStore()
    else:
        _blob_store = S3BlobStore(
            bucket=settings.bucket_name,
            region=settings.s3_region,
            endpoint=settings.s3_endpoint,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return _blob_store


def get_document_store() -> VersionedDocumentStore:
    """
    Return the process-wide document store so the cached dataset and its
    version survive across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    baseline: Document = load_baseline(settings.baseline_data_path)
    _document_store = VersionedDocumentStore(
        get_blob_store(),
        lambda: baseline,
        data_key=settings.data_key,
        version_key=settings.version_key,
        sync_mode=settings.remote_sync_mode,
    )
    return _document_store


def get_mutation_queue() -> MutationQueue:
    global _mutation_queue
    if _mutation_queue:
        return _mutation_queue

    settings = get_settings()
    _mutation_queue = MutationQueue(
        get_document_store(), interval_seconds=settings.drain_interval_seconds
    )
    return _mutation_queue


def get_collections() -> Collections:
    global _collections
    if _collections:
        return _collections
    _collections = Collections(get_document_store(), get_mutation_queue())
    return _collections


def reset_dependencies() -> None:
    """Drop all singletons (useful in tests)."""
    global _blob_store, _document_store, _mutation_queue, _collections
    _blob_store = None
    _document_store = None
    _mutation_queue = None
    _collections = None
