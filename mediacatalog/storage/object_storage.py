"""
S3 object storage client.

``store`` uploads one payload and returns its permanent URL plus the object key
(the storage id used later for deletion). No retries happen here; failures are
raised as distinct ``StorageError`` subclasses so the caller can decide.
Blocking boto3 calls run in the loop's default executor.
"""

import asyncio
import functools
import io
import logging
import mimetypes
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import BinaryIO, Iterator, Optional, Union
from uuid import uuid4

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from mediacatalog.core.config import settings
from mediacatalog.core.exceptions import PayloadTooLarge, StorageError, StorageNetworkError, StorageRejected

logger = logging.getLogger(__name__)

Payload = Union[bytes, BinaryIO]

# S3 error codes worth retrying
TRANSIENT_ERROR_CODES = {"RequestTimeout", "SlowDown", "ServiceUnavailable", "InternalError", "503", "500"}

VIDEO_TRANSFER_CONFIG = TransferConfig(
    multipart_threshold=8 * 1024 * 1024,
    multipart_chunksize=8 * 1024 * 1024,
    max_concurrency=4,
)


class ResourceKind(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


@dataclass(frozen=True)
class StoredObject:
    url: str
    storage_id: str


@dataclass(frozen=True)
class StoredObjectInfo:
    key: str
    last_modified: datetime


@contextmanager
def translate_storage_errors(key: str):
    """Map boto3/botocore failures onto the StorageError family."""
    try:
        yield
    except StorageError:
        raise
    except ClientError as e:
        code = str(e.response.get("Error", {}).get("Code", ""))
        if code in TRANSIENT_ERROR_CODES:
            raise StorageNetworkError(f"S3 transient error {code}", key, e) from e
        raise StorageRejected(f"S3 rejected the request: {code or e}", key, e) from e
    except (S3UploadFailedError, NoCredentialsError) as e:
        raise StorageRejected(f"S3 upload failed: {e}", key, e) from e
    except BotoCoreError as e:
        raise StorageNetworkError(f"S3 unreachable: {e}", key, e) from e


def payload_size(payload: Payload) -> int:
    if isinstance(payload, (bytes, bytearray)):
        return len(payload)
    position = payload.tell()
    payload.seek(0, os.SEEK_END)
    size = payload.tell()
    payload.seek(position)
    return size


def _guess_extension(filename: Optional[str], content_type: Optional[str], kind: ResourceKind) -> str:
    if filename:
        _, ext = os.path.splitext(filename)
        if ext:
            return ext.lower()
    if content_type:
        ext = mimetypes.guess_extension(content_type)
        if ext:
            return ext
    return ".mp4" if kind is ResourceKind.VIDEO else ".jpg"


class ObjectStorageClient:
    def __init__(
        self,
        client=None,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        max_video_bytes: Optional[int] = None,
        max_image_bytes: Optional[int] = None,
    ):
        self._client = client
        self.bucket = bucket or settings.AWS_S3_BUCKET
        self.region = region or settings.AWS_REGION
        self.endpoint_url = endpoint_url if endpoint_url is not None else settings.S3_ENDPOINT_URL
        self.public_base_url = public_base_url if public_base_url is not None else settings.STORAGE_PUBLIC_BASE_URL
        self.max_bytes = {
            ResourceKind.VIDEO: max_video_bytes or settings.MAX_UPLOAD_BYTES,
            ResourceKind.IMAGE: max_image_bytes or settings.MAX_THUMBNAIL_BYTES,
        }

    def _get_client(self):
        if self._client is None:
            if not self.bucket:
                raise StorageError("AWS_S3_BUCKET is not set in environment variables.")
            client_kwargs = {"region_name": self.region}
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            if self.endpoint_url:
                client_kwargs["endpoint_url"] = self.endpoint_url
                logger.info("S3 using custom endpoint: %s", self.endpoint_url)
            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def store_sync(
        self,
        payload: Payload,
        kind: ResourceKind,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> StoredObject:
        kind = ResourceKind(kind)
        size = payload_size(payload)
        limit = self.max_bytes[kind]
        if size > limit:
            raise PayloadTooLarge(f"{kind.value} payload is {size} bytes, limit is {limit}")

        ext = _guess_extension(filename, content_type, kind)
        key = f"{folder.strip('/')}/{uuid4().hex}{ext}"
        content_type = content_type or mimetypes.guess_type(key)[0] or "application/octet-stream"

        with translate_storage_errors(key):
            client = self._get_client()
            if kind is ResourceKind.VIDEO:
                fileobj = io.BytesIO(payload) if isinstance(payload, (bytes, bytearray)) else payload
                fileobj.seek(0)
                client.upload_fileobj(
                    fileobj,
                    self.bucket,
                    key,
                    ExtraArgs={"ContentType": content_type},
                    Config=VIDEO_TRANSFER_CONFIG,
                )
            else:
                body = payload if isinstance(payload, (bytes, bytearray)) else payload.read()
                client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)

        logger.info("S3 storage: uploaded %s (%s, %d bytes)", key, kind.value, size)
        return StoredObject(url=self.public_url(key), storage_id=key)

    def delete_sync(self, storage_id: str) -> None:
        with translate_storage_errors(storage_id):
            self._get_client().delete_object(Bucket=self.bucket, Key=storage_id)
        logger.info("S3 storage: deleted %s", storage_id)

    def iter_objects(self, folder: str) -> Iterator[StoredObjectInfo]:
        prefix = f"{folder.strip('/')}/"
        with translate_storage_errors(prefix):
            paginator = self._get_client().get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    yield StoredObjectInfo(key=obj["Key"], last_modified=obj["LastModified"])

    async def store(
        self,
        payload: Payload,
        kind: ResourceKind,
        folder: str,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> StoredObject:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            functools.partial(self.store_sync, payload, kind, folder, filename=filename, content_type=content_type),
        )

    async def delete(self, storage_id: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.delete_sync, storage_id)

