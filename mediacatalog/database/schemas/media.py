from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Untitled Video"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        return DEFAULT_TITLE
    return title.strip()


class CounterField(str, Enum):
    VIEWS = "views"
    LIKES = "likes"
    DISLIKES = "dislikes"


class MediaRecord(BaseModel):
    """A catalog entry. Stored with snake_case keys, rendered in camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", serialization_alias="id")
    title: str = DEFAULT_TITLE
    media_url: str = Field(..., serialization_alias="mediaUrl")
    thumbnail_url: str = Field(default="", serialization_alias="thumbnailUrl")

    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    dislikes: int = Field(default=0, ge=0)
    comments: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow, serialization_alias="createdAt")

    # internal: lets the reconciler match stored objects to records
    storage_id: Optional[str] = Field(default=None, exclude=True)
    thumbnail_storage_id: Optional[str] = Field(default=None, exclude=True)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, v):
        if isinstance(v, ObjectId):
            return str(v)
        return v

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _empty_thumbnail(cls, v):
        return v or ""

    @classmethod
    def from_document(cls, doc: dict) -> "MediaRecord":
        return cls.model_validate(doc)


def new_record_document(
    title: Optional[str],
    media_url: str,
    thumbnail_url: str = "",
    storage_id: Optional[str] = None,
    thumbnail_storage_id: Optional[str] = None,
) -> dict:
    """Build the document inserted for a freshly ingested video (no ``_id``)."""
    return {
        "title": normalize_title(title),
        "media_url": media_url,
        "thumbnail_url": thumbnail_url or "",
        "views": 0,
        "likes": 0,
        "dislikes": 0,
        "comments": [],
        "created_at": utcnow(),
        "storage_id": storage_id,
        "thumbnail_storage_id": thumbnail_storage_id,
    }


class UploadResponse(BaseModel):
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None


class ActionResponse(BaseModel):
    success: bool


class VideoPage(BaseModel):
    videos: List[MediaRecord]
    has_more: bool = Field(..., serialization_alias="hasMore")


class SaveVideoRequest(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    thumbnail: Optional[str] = None


class CommentRequest(BaseModel):
    text: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    catalog: str
