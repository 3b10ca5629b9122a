"""
Blob storage abstraction for S3-compatible object stores and in-memory testing.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from admin_backend.errors import BlobNotFoundError, BlobTransportError

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


class BlobStore(Protocol):
    """Plain key/value string contract over object storage."""

    async def put(self, key: str, value: str) -> None:
        ...

    async def get(self, key: str) -> str:
        ...

    async def delete(self, key: str) -> None:
        ...

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "image/png"
    ) -> str:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict[str, str] = field(default_factory=dict)
    # Called with (operation, key) before every operation; raise to simulate failures.
    fail_hook: Optional[Callable[[str, str], None]] = None
    writes: list[tuple[str, str]] = field(default_factory=list)

    def _check(self, operation: str, key: str) -> None:
        if self.fail_hook is not None:
            self.fail_hook(operation, key)

    async def put(self, key: str, value: str) -> None:
        self._check("put", key)
        self.stored_objects[key] = value
        self.writes.append((key, value))

    async def get(self, key: str) -> str:
        self._check("get", key)
        stored = self.stored_objects.get(key)
        if stored is None:
            raise BlobNotFoundError(key)
        return stored

    async def delete(self, key: str) -> None:
        self._check("delete", key)
        if key not in self.stored_objects:
            raise BlobNotFoundError(key)
        del self.stored_objects[key]

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "image/png"
    ) -> str:
        return f"{self.base_url}/{key}?op=put&expires={expires_in}&type={content_type}"


@dataclass
class S3BlobStore:
    """
    S3-compatible blob store. boto3 is blocking, so every call runs in a worker thread.
    """

    bucket: str
    region: Optional[str] = None
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    acl: str = "public-read"

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        # Without explicit keys boto3 falls back to the shared credentials file.
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    async def put(self, key: str, value: str) -> None:
        await self._call(
            "put_object",
            key,
            Bucket=self.bucket,
            Key=key,
            Body=value.encode("utf-8"),
            ACL=self.acl,
        )

    async def get(self, key: str) -> str:
        response = await self._call(
            "get_object", key, Bucket=self.bucket, Key=key
        )
        body = await asyncio.to_thread(response["Body"].read)
        return body.decode("utf-8")

    async def delete(self, key: str) -> None:
        await self._call("delete_object", key, Bucket=self.bucket, Key=key)

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "image/png"
    ) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ACL": self.acl,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise BlobTransportError(f"failed to sign upload url for {key}: {exc}") from exc

    async def _call(self, operation: str, key: str, **params):
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, **params)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                raise BlobNotFoundError(key) from exc
            raise BlobTransportError(f"{operation} {key} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise BlobTransportError(f"{operation} {key} failed: {exc}") from exc
