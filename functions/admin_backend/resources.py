"""
Named record collections (people, questions, shop items) on top of the
versioned document. Reads reconcile first; writes go through the mutation queue.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Iterable, Optional

from admin_backend.document_store import VersionedDocumentStore
from admin_backend.errors import EntityNotFoundError
from admin_backend.mutation_queue import MutationQueue
from admin_backend.schemas import Document, Record

logger = logging.getLogger(__name__)

QUESTION_IMAGE_VARIANTS = ("default", "correct")


def question_image_key(entity_id: str, variant: str) -> str:
    return f"images/questions/{entity_id}_{variant}.png"


def shop_image_key(entity_id: str) -> str:
    return f"images/shop/{entity_id}.png"


class ResourceCollection:
    def __init__(
        self,
        name: str,
        store: VersionedDocumentStore,
        queue: MutationQueue,
        *,
        image_key: Callable[..., str] | None = None,
        image_variants: Iterable[str] = (),
    ):
        if name not in Document.model_fields:
            raise ValueError(f"unknown collection: {name}")
        self.name = name
        self.store = store
        self.queue = queue
        self.image_key = image_key
        self.image_variants = tuple(image_variants)

    def _image_key(self, entity_id: str, variant: Optional[str] = None) -> str:
        """
        Object key of an entity image. Collections without variants store a
        single image per entity and take no variant.
        """
        if self.image_key is None:
            raise EntityNotFoundError(self.name, entity_id)
        if not self.image_variants:
            return self.image_key(entity_id)
        if variant not in self.image_variants:
            raise ValueError(f"unknown image variant: {variant}")
        return self.image_key(entity_id, variant)

    def image_keys(self, entity_id: str) -> list[str]:
        if self.image_key is None:
            return []
        if not self.image_variants:
            return [self._image_key(entity_id)]
        return [self._image_key(entity_id, v) for v in self.image_variants]

    def _records(self, document: Document) -> list[Record]:
        return getattr(document, self.name)

    async def list(self) -> list[Record]:
        await self.store.reconcile()
        return self._records(self.store.document)

    async def get(self, entity_id: str) -> Record:
        for record in await self.list():
            if record.get("id") == entity_id:
                return record
        raise EntityNotFoundError(self.name, entity_id)

    async def create(self, payload: dict[str, Any]) -> str:
        entity_id = str(uuid.uuid4())
        record = dict(payload)
        record["id"] = entity_id

        def add(document: Document) -> None:
            self._records(document).append(record)

        await self.queue.apply(add)
        return entity_id

    async def replace(self, entity_id: str, payload: dict[str, Any]) -> None:
        record = dict(payload)

        def overwrite(document: Document) -> None:
            setattr(
                document,
                self.name,
                [
                    record if existing.get("id") == entity_id else existing
                    for existing in self._records(document)
                ],
            )

        await self.queue.apply(overwrite)

    async def delete(self, entity_id: str) -> None:
        def remove(document: Document) -> None:
            setattr(
                document,
                self.name,
                [r for r in self._records(document) if r.get("id") != entity_id],
            )

        await self.queue.apply(remove)
        await self._delete_images(entity_id)

    async def _delete_images(self, entity_id: str) -> None:
        for key in self.image_keys(entity_id):
            try:
                await self.store.blob_store.delete(key)
            except Exception as exc:
                logger.debug("Ignoring failed image delete for %s: %s", key, exc)

    def image_upload_url(
        self, entity_id: str, variant: Optional[str] = None, expires_in: int = 3600
    ) -> str:
        return self.store.blob_store.presign_put(
            self._image_key(entity_id, variant),
            expires_in=expires_in,
            content_type="image/png",
        )


class Collections:
    """The three collections sharing one store and queue."""

    def __init__(self, store: VersionedDocumentStore, queue: MutationQueue):
        self.people = ResourceCollection("people", store, queue)
        self.questions = ResourceCollection(
            "questions",
            store,
            queue,
            image_key=question_image_key,
            image_variants=QUESTION_IMAGE_VARIANTS,
        )
        self.items = ResourceCollection(
            "items",
            store,
            queue,
            image_key=shop_image_key,
        )
