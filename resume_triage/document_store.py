"""Raw résumé document storage: local directory or S3 bucket."""

import asyncio
import logging
import time
import uuid
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from screening.errors import FetchFailed, PersistenceFailed

log = logging.getLogger(__name__)

KEY_PREFIX = "resumes"


def make_key(name: str) -> str:
    """Opaque key scoped by an upload timestamp prefix: resumes/<epoch-ms>-<rand>-<name>."""
    safe_name = "".join(c if c.isalnum() or c in ".-_" else "_" for c in Path(name).name) or "document"
    return f"{KEY_PREFIX}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"


class LocalDocumentStore:
    """Documents kept as files under a root directory, keyed by relative path."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise FetchFailed(f"Invalid document key: {key}")
        return path

    def _put(self, data: bytes, name: str) -> str:
        key = make_key(name)
        path = self.root / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise PersistenceFailed(f"Failed to store document {name}: {e}") from e
        return key

    def _get(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise FetchFailed(f"Document not found or not readable: {key}") from e

    def _delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailed(f"Failed to delete document {key}: {e}") from e

    async def put(self, data: bytes, name: str, content_type: str) -> str:
        return await asyncio.to_thread(self._put, data, name)

    async def get(self, key: str) -> bytes:
        return await asyncio.to_thread(self._get, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


class S3DocumentStore:
    """Documents kept in an S3 bucket. boto3 calls run in a worker thread."""

    def __init__(self, bucket: str, region: str = "us-east-1", client=None):
        self.bucket = bucket
        self.client = client or boto3.client("s3", region_name=region)

    def _put(self, data: bytes, name: str, content_type: str) -> str:
        key = make_key(name)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            log.error("Error uploading file to S3: %s", e)
            raise PersistenceFailed(f"Failed to upload file to S3: {e}") from e
        return key

    def _get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            log.error("Error getting file from S3: %s", e)
            raise FetchFailed(f"Failed to get file from S3: {key}") from e

    def _delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            log.error("Error deleting file from S3: %s", e)
            raise PersistenceFailed(f"Failed to delete file from S3: {key}") from e

    async def put(self, data: bytes, name: str, content_type: str) -> str:
        return await asyncio.to_thread(self._put, data, name, content_type)

    async def get(self, key: str) -> bytes:
        return await asyncio.to_thread(self._get, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


def create_document_store(config: dict):
    """Select the document store from storage config (DOCUMENT_STORE=local|s3)."""
    kind = config["document_store"]
    if kind == "s3":
        if not config.get("s3_bucket"):
            raise ValueError("AWS_S3_BUCKET is required when DOCUMENT_STORE=s3.")
        return S3DocumentStore(config["s3_bucket"], region=config["aws_region"])
    if kind == "local":
        return LocalDocumentStore(config["document_dir"])
    raise ValueError(f"Unsupported document store: {kind}")
