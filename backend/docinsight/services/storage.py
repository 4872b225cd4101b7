import logging
import os
from pathlib import Path
from typing import Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...
    def get(self, locator: str) -> bytes: ...
    def delete(self, locator: str) -> None: ...


def _endpoint_url() -> str | None:
    endpoint = os.getenv("MINIO_ENDPOINT", "minio:9000")
    secure = os.getenv("MINIO_SECURE", "false").lower() == "true"
    if endpoint and not endpoint.startswith("http"):
        endpoint = f"{'https' if secure else 'http'}://{endpoint}"
    return endpoint or None


def _s3_client():
    return boto3.client(
        "s3",
        endpoint_url=_endpoint_url(),
        aws_access_key_id=os.getenv("MINIO_ACCESS_KEY", "minioadmin"),
        aws_secret_access_key=os.getenv("MINIO_SECRET_KEY", "minioadmin"),
        region_name=os.getenv("AWS_REGION", "us-east-1"),
        config=Config(signature_version="s3v4"),
    )


class S3BlobStore:
    """S3 / MinIO bucket. Locators are object keys."""

    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or os.getenv("MINIO_BUCKET", "documents")
        self._s3 = client or _s3_client()
        self._bucket_ready = False

    def ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        try:
            self._s3.head_bucket(Bucket=self.bucket)
        except ClientError:
            self._s3.create_bucket(Bucket=self.bucket)
        self._bucket_ready = True

    def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self.ensure_bucket()
            self._s3.put_object(Bucket=self.bucket, Key=path, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload failed: {e}") from e
        return path

    def get(self, locator: str) -> bytes:
        try:
            obj = self._s3.get_object(Bucket=self.bucket, Key=locator)
            return obj["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to fetch {locator}: {e}") from e

    def delete(self, locator: str) -> None:
        try:
            self._s3.delete_object(Bucket=self.bucket, Key=locator)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete {locator}: {e}") from e


class LocalBlobStore:
    """Directory on local disk, for dev and tests. Locators are paths relative to root."""

    def __init__(self, root: str | os.PathLike | None = None):
        self.root = Path(root or os.getenv("STORAGE_LOCAL_ROOT", "./app_storage")).expanduser()

    def _resolve(self, locator: str) -> Path:
        path = (self.root / locator).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Locator escapes storage root: {locator}")
        return path

    def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Upload failed: {e}") from e
        return path

    def get(self, locator: str) -> bytes:
        try:
            return self._resolve(locator).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to fetch {locator}: {e}") from e

    def delete(self, locator: str) -> None:
        try:
            self._resolve(locator).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {locator}: {e}") from e


_store: BlobStore | None = None


def get_store() -> BlobStore:
    global _store
    if _store is None:
        backend = os.getenv("STORAGE_BACKEND", "s3").lower()
        if backend == "local":
            _store = LocalBlobStore()
        else:
            _store = S3BlobStore()
        logger.info("Using %s blob store", type(_store).__name__)
    return _store
