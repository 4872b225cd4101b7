import os
import tempfile
import unittest
from unittest.mock import patch, MagicMock

from botocore.exceptions import ClientError

from docinsight.errors import StorageError
from docinsight.services import storage


class TestStorageInit(unittest.TestCase):
    def setUp(self):
        storage._store = None

    def tearDown(self):
        storage._store = None

    @patch.dict(os.environ, {
        "MINIO_ENDPOINT": "minio:9000",
        "MINIO_SECURE": "false",
        "MINIO_ACCESS_KEY": "test",
        "MINIO_SECRET_KEY": "test"
    })
    def test_endpoint_prepends_http(self):
        """Test that http:// is prepended to endpoint if missing."""
        client = storage.S3BlobStore()._s3
        self.assertEqual(client.meta.endpoint_url, "http://minio:9000")

    @patch.dict(os.environ, {
        "MINIO_ENDPOINT": "minio:9000",
        "MINIO_SECURE": "true",
        "MINIO_ACCESS_KEY": "test",
        "MINIO_SECRET_KEY": "test"
    })
    def test_endpoint_prepends_https_secure(self):
        """Test that https:// is prepended to endpoint if missing and secure is true."""
        client = storage.S3BlobStore()._s3
        self.assertEqual(client.meta.endpoint_url, "https://minio:9000")

    @patch.dict(os.environ, {
        "MINIO_ENDPOINT": "http://minio:9000",
        "MINIO_SECURE": "false",
        "MINIO_ACCESS_KEY": "test",
        "MINIO_SECRET_KEY": "test"
    })
    def test_endpoint_no_double_prepend(self):
        """Test that scheme is not prepended if already present."""
        client = storage.S3BlobStore()._s3
        self.assertEqual(client.meta.endpoint_url, "http://minio:9000")

    @patch.dict(os.environ, {"STORAGE_BACKEND": "local"})
    def test_backend_selection_local(self):
        self.assertIsInstance(storage.get_store(), storage.LocalBlobStore)
        self.assertIs(storage.get_store(), storage.get_store())

    @patch.dict(os.environ, {"STORAGE_BACKEND": "s3", "MINIO_ENDPOINT": "minio:9000"})
    def test_backend_selection_s3(self):
        self.assertIsInstance(storage.get_store(), storage.S3BlobStore)


class TestS3BlobStore(unittest.TestCase):
    def test_put_creates_missing_bucket_once(self):
        s3 = MagicMock()
        s3.head_bucket.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadBucket")
        store = storage.S3BlobStore(bucket="docs", client=s3)

        self.assertEqual(store.put("u/1_a.txt", b"a", "text/plain"), "u/1_a.txt")
        store.put("u/2_b.txt", b"b")

        s3.create_bucket.assert_called_once_with(Bucket="docs")
        self.assertEqual(s3.put_object.call_count, 2)

    def test_client_errors_become_storage_errors(self):
        s3 = MagicMock()
        s3.delete_object.side_effect = ClientError({"Error": {"Code": "500"}}, "DeleteObject")
        store = storage.S3BlobStore(bucket="docs", client=s3)

        with self.assertRaises(StorageError):
            store.delete("u/1_a.txt")


class TestLocalBlobStore(unittest.TestCase):
    def test_put_get_delete(self):
        with tempfile.TemporaryDirectory() as root:
            store = storage.LocalBlobStore(root)
            locator = store.put("user/1_notes.txt", b"hello")
            self.assertEqual(store.get(locator), b"hello")
            store.delete(locator)
            with self.assertRaises(StorageError):
                store.get(locator)

    def test_rejects_paths_outside_root(self):
        with tempfile.TemporaryDirectory() as root:
            store = storage.LocalBlobStore(root)
            with self.assertRaises(StorageError):
                store.put("../escape.txt", b"nope")


if __name__ == '__main__':
    unittest.main()
