import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile

from mediacatalog.api.dependencies import get_gate, get_interactions, get_orchestrator, get_reader
from mediacatalog.core.exceptions import NotFound
from mediacatalog.core.readiness import ReadinessGate
from mediacatalog.database.schemas.media import (
    ActionResponse,
    CommentRequest,
    HealthResponse,
    SaveVideoRequest,
    UploadResponse,
    VideoPage,
)
from mediacatalog.services.ingestion import IngestionOrchestrator, PendingUpload
from mediacatalog.services.interactions import InteractionService
from mediacatalog.services.reader import CatalogReader

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_video(
    video: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    thumbnail: Optional[str] = Form(None),
    x_admin_password: Optional[str] = Header(None),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
):
    upload = PendingUpload(
        title=title,
        auth_token=x_admin_password,
        video=video.file if video is not None else None,
        video_filename=video.filename if video is not None else None,
        video_content_type=video.content_type if video is not None else None,
        video_url=url,
        thumbnail=thumbnail,
    )
    record = await orchestrator.ingest(upload)
    return UploadResponse(success=True, id=record.id)


@router.post("/save-video", response_model=UploadResponse, response_model_exclude_none=True)
async def save_video(
    payload: SaveVideoRequest,
    x_admin_password: Optional[str] = Header(None),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
):
    upload = PendingUpload(
        title=payload.title,
        auth_token=x_admin_password,
        video_url=payload.url,
        thumbnail=payload.thumbnail,
    )
    record = await orchestrator.ingest(upload)
    return UploadResponse(success=True, id=record.id)


@router.get("/videos")
async def list_videos(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    reader: CatalogReader = Depends(get_reader),
):
    # bare array unless pagination was asked for
    if page is None and limit is None:
        return await reader.list_all()

    result = await reader.list_page(page=1 if page is None else page, limit=limit)
    return VideoPage(videos=result.records, has_more=result.has_more)


@router.get("/videos/{video_id}")
async def get_video(video_id: str, reader: CatalogReader = Depends(get_reader)):
    record = await reader.get(video_id)
    if record is None:
        raise NotFound()
    return record


@router.post("/view/{video_id}", response_model=ActionResponse)
async def view_video(video_id: str, interactions: InteractionService = Depends(get_interactions)):
    await interactions.record_view(video_id)
    return ActionResponse(success=True)


@router.post("/like/{video_id}", response_model=ActionResponse)
async def like_video(video_id: str, interactions: InteractionService = Depends(get_interactions)):
    await interactions.record_like(video_id)
    return ActionResponse(success=True)


@router.post("/dislike/{video_id}", response_model=ActionResponse)
async def dislike_video(video_id: str, interactions: InteractionService = Depends(get_interactions)):
    await interactions.record_dislike(video_id)
    return ActionResponse(success=True)


@router.post("/comment/{video_id}", response_model=ActionResponse)
async def comment_video(
    video_id: str,
    payload: Optional[CommentRequest] = None,
    interactions: InteractionService = Depends(get_interactions),
):
    await interactions.add_comment(video_id, payload.text if payload is not None else None)
    return ActionResponse(success=True)


@router.get("/health", response_model=HealthResponse)
async def health(gate: ReadinessGate = Depends(get_gate)):
    return HealthResponse(status="ok", catalog="ready" if gate.is_ready else "unavailable")
