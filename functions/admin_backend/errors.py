"""
Error taxonomy for the admin backend.
"""

from __future__ import annotations


class AdminBackendError(Exception):
    """Base class for errors raised by the admin backend."""


class BlobTransportError(AdminBackendError):
    """Network or object-store failure. Callers decide whether to retry."""


class BlobNotFoundError(AdminBackendError):
    """The requested object key does not exist."""

    def __init__(self, key: str):
        super().__init__(f"object not found: {key}")
        self.key = key


class EntityNotFoundError(AdminBackendError):
    def __init__(self, collection: str, entity_id: str):
        super().__init__(f"{collection}/{entity_id} not found")
        self.collection = collection
        self.entity_id = entity_id


class DocumentParseError(AdminBackendError):
    """The remote document payload could not be parsed."""


class AuthError(AdminBackendError):
    """Missing, invalid or expired credential."""
