import io
import unittest
from unittest.mock import MagicMock

from botocore.exceptions import ClientError, EndpointConnectionError

from admin_backend.errors import BlobNotFoundError, BlobTransportError
from admin_backend.storage import InMemoryBlobStore, S3BlobStore


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class InMemoryBlobStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_put_get_delete(self):
        store = InMemoryBlobStore()
        await store.put("data/version.json", "3")
        self.assertEqual(await store.get("data/version.json"), "3")
        await store.delete("data/version.json")
        with self.assertRaises(BlobNotFoundError):
            await store.get("data/version.json")

    async def test_missing_delete_raises_not_found(self):
        with self.assertRaises(BlobNotFoundError):
            await InMemoryBlobStore().delete("images/shop/x.png")


class S3BlobStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = S3BlobStore(
            bucket="rtmcs",
            region="us-east-1",
            access_key_id="test",
            secret_access_key="test",
        )
        self.client = MagicMock()
        self.store._client = self.client

    async def test_put_uploads_public_read_string(self):
        await self.store.put("data/index.json", '{"people": []}')
        self.client.put_object.assert_called_once_with(
            Bucket="rtmcs",
            Key="data/index.json",
            Body=b'{"people": []}',
            ACL="public-read",
        )

    async def test_get_returns_decoded_body(self):
        self.client.get_object.return_value = {"Body": io.BytesIO(b"17")}
        self.assertEqual(await self.store.get("data/version.json"), "17")
        self.client.get_object.assert_called_once_with(
            Bucket="rtmcs", Key="data/version.json"
        )

    async def test_missing_key_maps_to_not_found(self):
        self.client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")
        with self.assertRaises(BlobNotFoundError) as ctx:
            await self.store.get("data/version.json")
        self.assertEqual(ctx.exception.key, "data/version.json")

    async def test_other_client_errors_map_to_transport(self):
        self.client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
        with self.assertRaises(BlobTransportError):
            await self.store.put("data/index.json", "{}")

    async def test_connection_errors_map_to_transport(self):
        self.client.delete_object.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.test"
        )
        with self.assertRaises(BlobTransportError):
            await self.store.delete("images/shop/1.png")

    def test_presign_put_requests_png_public_read(self):
        self.client.generate_presigned_url.return_value = "https://signed"
        url = self.store.presign_put("images/questions/q_default.png", expires_in=3600)
        self.assertEqual(url, "https://signed")
        self.client.generate_presigned_url.assert_called_once_with(
            ClientMethod="put_object",
            Params={
                "Bucket": "rtmcs",
                "Key": "images/questions/q_default.png",
                "ACL": "public-read",
                "ContentType": "image/png",
            },
            ExpiresIn=3600,
        )


if __name__ == "__main__":
    unittest.main()
