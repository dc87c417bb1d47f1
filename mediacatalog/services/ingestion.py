"""
Ingestion of new videos into the catalog.

An ingestion is a two-step saga: upload to object storage, then write the
catalog record. Storage always goes first so a visible record never points at
a missing object. If the catalog write fails, the compensation step deletes the
objects uploaded for this call, once each; anything it cannot delete is left
for the periodic orphan reconciler.
"""

import asyncio
import hmac
import logging
import random
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from pymongo.errors import PyMongoError

from mediacatalog.core.config import settings
from mediacatalog.core.exceptions import (
    CatalogWriteFailed,
    InvalidInput,
    StorageError,
    StorageUploadFailed,
    Unauthorized,
)
from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.database.schemas.media import MediaRecord, new_record_document
from mediacatalog.storage.object_storage import Payload, ResourceKind, StoredObject, payload_size
from mediacatalog.utils.data_uri import decode_image_data_uri

logger = logging.getLogger(__name__)


@dataclass
class PendingUpload:
    """In-flight state of one ingestion call. Never persisted."""

    title: Optional[str] = None
    auth_token: Optional[str] = None
    video: Optional[Payload] = None
    video_filename: Optional[str] = None
    video_content_type: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail: Optional[str] = None  # image data URI


class IngestionOrchestrator:
    def __init__(
        self,
        gate: ReadinessGate,
        storage,
        store,
        admin_password: Optional[str] = None,
        max_upload_bytes: Optional[int] = None,
        upload_retries: Optional[int] = None,
        retry_base_sec: Optional[float] = None,
        video_folder: Optional[str] = None,
        thumbnail_folder: Optional[str] = None,
    ):
        self.gate = gate
        self.storage = storage
        self.store = store
        self.admin_password = settings.ADMIN_PASSWORD if admin_password is None else admin_password
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.upload_retries = settings.STORAGE_UPLOAD_RETRIES if upload_retries is None else upload_retries
        self.retry_base_sec = settings.STORAGE_RETRY_BASE_SEC if retry_base_sec is None else retry_base_sec
        self.video_folder = video_folder or settings.VIDEO_FOLDER
        self.thumbnail_folder = thumbnail_folder or settings.THUMBNAIL_FOLDER

    async def ingest(self, upload: PendingUpload) -> MediaRecord:
        self.gate.require_ready()
        self._authorize(upload.auth_token)
        self._validate(upload)

        video = None
        if upload.video is not None:
            video = await self._upload_video(upload)
            media_url = video.url
        else:
            media_url = upload.video_url.strip()

        thumbnail = await self._upload_thumbnail(upload.thumbnail)

        document = new_record_document(
            title=upload.title,
            media_url=media_url,
            thumbnail_url=thumbnail.url if thumbnail else "",
            storage_id=video.storage_id if video else None,
            thumbnail_storage_id=thumbnail.storage_id if thumbnail else None,
        )
        try:
            record = await self.store.create(document)
        except PyMongoError as e:
            logger.error("Catalog write failed after upload of %s: %s", media_url, e)
            compensated = await self._compensate([obj for obj in (video, thumbnail) if obj is not None])
            raise CatalogWriteFailed(compensated=compensated) from e

        logger.info("Ingested video id=%s title=%r", record.id, record.title)
        return record

    def _authorize(self, token: Optional[str]) -> None:
        if not self.admin_password or not token:
            raise Unauthorized()
        if not hmac.compare_digest(token.encode("utf-8"), self.admin_password.encode("utf-8")):
            raise Unauthorized()

    def _validate(self, upload: PendingUpload) -> None:
        if upload.video is not None:
            size = payload_size(upload.video)
            if size == 0:
                raise InvalidInput("Video file is empty")
            if size > self.max_upload_bytes:
                raise InvalidInput(f"Video exceeds the {self.max_upload_bytes} byte limit")
            return

        if not upload.video_url or not upload.video_url.strip():
            raise InvalidInput("No video file or URL provided")
        parsed = urlparse(upload.video_url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidInput("Video URL must be an http(s) URL")

    async def _upload_video(self, upload: PendingUpload) -> StoredObject:
        attempts = 1 + max(self.upload_retries, 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self.storage.store(
                    upload.video,
                    ResourceKind.VIDEO,
                    self.video_folder,
                    filename=upload.video_filename,
                    content_type=upload.video_content_type,
                )
            except StorageError as e:
                if e.retryable and attempt < attempts:
                    # exponential backoff with jitter
                    backoff = self.retry_base_sec * (2 ** (attempt - 1))
                    wait_time = backoff + random.uniform(0, backoff)
                    logger.warning(
                        "Video upload attempt %d/%d failed, retrying in %.2fs: %s", attempt, attempts, wait_time, e
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error("Video upload failed after %d attempt(s): %s", attempt, e)
                raise StorageUploadFailed() from e

    async def _upload_thumbnail(self, data_uri: Optional[str]) -> Optional[StoredObject]:
        """Best effort: any failure is logged and yields no thumbnail."""
        if not data_uri:
            return None
        try:
            image = decode_image_data_uri(data_uri)
        except ValueError as e:
            logger.warning("Ignoring thumbnail, could not decode data URI: %s", e)
            return None
        try:
            return await self.storage.store(
                image.data,
                ResourceKind.IMAGE,
                self.thumbnail_folder,
                content_type=image.content_type,
            )
        except StorageError as e:
            logger.warning("Thumbnail upload failed, continuing without thumbnail: %s", e)
            return None

    async def _compensate(self, objects: List[StoredObject]) -> bool:
        compensated = True
        for obj in objects:
            try:
                await self.storage.delete(obj.storage_id)
                logger.warning("Compensation: deleted orphaned object %s", obj.storage_id)
            except StorageError as e:
                compensated = False
                logger.error(
                    "Compensation failed for %s, leaving it for reconciliation: %s", obj.storage_id, e
                )
        return compensated
