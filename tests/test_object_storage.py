"""
ObjectStorageClient tests with a mocked boto3 client.
"""

import io
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError, EndpointConnectionError, ReadTimeoutError

from mediacatalog.core.exceptions import PayloadTooLarge, StorageNetworkError, StorageRejected
from mediacatalog.storage.object_storage import (
    VIDEO_TRANSFER_CONFIG,
    ObjectStorageClient,
    ResourceKind,
    payload_size,
)


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "PutObject")


@pytest.fixture
def s3():
    return MagicMock()


@pytest.fixture
def storage(s3):
    return ObjectStorageClient(
        client=s3,
        bucket="media-bucket",
        region="eu-west-1",
        endpoint_url="",
        public_base_url="",
        max_video_bytes=100,
        max_image_bytes=10,
    )


class TestStoreVideo:
    def test_video_uses_multipart_transfer(self, storage, s3):
        stored = storage.store_sync(b"v" * 50, ResourceKind.VIDEO, "videos", filename="Clip.MOV")

        s3.upload_fileobj.assert_called_once()
        args, kwargs = s3.upload_fileobj.call_args
        assert args[1] == "media-bucket"
        assert args[2] == stored.storage_id
        assert kwargs["Config"] is VIDEO_TRANSFER_CONFIG
        assert stored.storage_id.startswith("videos/")
        assert stored.storage_id.endswith(".mov")
        assert stored.url == f"https://media-bucket.s3.eu-west-1.amazonaws.com/{stored.storage_id}"

    def test_each_upload_gets_a_fresh_key(self, storage):
        first = storage.store_sync(b"a", ResourceKind.VIDEO, "videos")
        second = storage.store_sync(b"a", ResourceKind.VIDEO, "videos")
        assert first.storage_id != second.storage_id

    def test_oversized_payload_makes_no_call(self, storage, s3):
        with pytest.raises(PayloadTooLarge):
            storage.store_sync(b"v" * 101, ResourceKind.VIDEO, "videos")
        s3.upload_fileobj.assert_not_called()

    def test_file_like_payload_size(self):
        payload = io.BytesIO(b"12345")
        payload.seek(2)
        assert payload_size(payload) == 5
        assert payload.tell() == 2

    @pytest.mark.anyio
    async def test_async_store(self, storage, s3):
        stored = await storage.store(io.BytesIO(b"abc"), ResourceKind.VIDEO, "videos", content_type="video/webm")
        assert stored.storage_id.startswith("videos/")
        _, kwargs = s3.upload_fileobj.call_args
        assert kwargs["ExtraArgs"] == {"ContentType": "video/webm"}


class TestStoreImage:
    def test_image_is_single_put(self, storage, s3):
        stored = storage.store_sync(b"png", ResourceKind.IMAGE, "thumbnails", content_type="image/png")

        s3.put_object.assert_called_once_with(
            Bucket="media-bucket", Key=stored.storage_id, Body=b"png", ContentType="image/png"
        )
        s3.upload_fileobj.assert_not_called()
        assert stored.storage_id.endswith(".png")

    def test_image_has_its_own_ceiling(self, storage, s3):
        with pytest.raises(PayloadTooLarge):
            storage.store_sync(b"x" * 11, ResourceKind.IMAGE, "thumbnails")
        s3.put_object.assert_not_called()


class TestErrorMapping:
    def test_rejection(self, storage, s3):
        s3.put_object.side_effect = client_error("InvalidArgument")
        with pytest.raises(StorageRejected):
            storage.store_sync(b"x", ResourceKind.IMAGE, "thumbnails")

    def test_transient_client_error_is_network(self, storage, s3):
        s3.put_object.side_effect = client_error("SlowDown")
        with pytest.raises(StorageNetworkError) as exc_info:
            storage.store_sync(b"x", ResourceKind.IMAGE, "thumbnails")
        assert exc_info.value.retryable is True

    def test_connection_failure(self, storage, s3):
        s3.upload_fileobj.side_effect = EndpointConnectionError(endpoint_url="https://s3.example.com")
        with pytest.raises(StorageNetworkError):
            storage.store_sync(b"x", ResourceKind.VIDEO, "videos")

    def test_read_timeout(self, storage, s3):
        s3.upload_fileobj.side_effect = ReadTimeoutError(endpoint_url="https://s3.example.com")
        with pytest.raises(StorageNetworkError):
            storage.store_sync(b"x", ResourceKind.VIDEO, "videos")

    def test_upload_failed(self, storage, s3):
        s3.upload_fileobj.side_effect = S3UploadFailedError("Failed to upload")
        with pytest.raises(StorageRejected) as exc_info:
            storage.store_sync(b"x", ResourceKind.VIDEO, "videos")
        assert exc_info.value.retryable is False


class TestDeleteAndList:
    def test_delete(self, storage, s3):
        storage.delete_sync("videos/a.mp4")
        s3.delete_object.assert_called_once_with(Bucket="media-bucket", Key="videos/a.mp4")

    @pytest.mark.anyio
    async def test_async_delete_maps_errors(self, storage, s3):
        s3.delete_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example.com")
        with pytest.raises(StorageNetworkError):
            await storage.delete("videos/a.mp4")

    def test_iter_objects(self, storage, s3):
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "videos/a.mp4", "LastModified": when}]},
            {},
        ]
        s3.get_paginator.return_value = paginator

        objects = list(storage.iter_objects("videos"))

        paginator.paginate.assert_called_once_with(Bucket="media-bucket", Prefix="videos/")
        assert [(o.key, o.last_modified) for o in objects] == [("videos/a.mp4", when)]


class TestPublicUrl:
    def test_public_base_url_wins(self, s3):
        storage = ObjectStorageClient(client=s3, bucket="b", public_base_url="https://cdn.example.com/")
        assert storage.public_url("videos/a.mp4") == "https://cdn.example.com/videos/a.mp4"

    def test_custom_endpoint(self, s3):
        storage = ObjectStorageClient(client=s3, bucket="b", endpoint_url="http://minio:9000", public_base_url="")
        assert storage.public_url("videos/a.mp4") == "http://minio:9000/b/videos/a.mp4"
