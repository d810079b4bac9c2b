"""
Video metadata (create/list/get/delete) and video file upload.
Upload flow: temp file -> ffprobe aspect classification -> ffmpeg fast-start copy ->
S3 under <aspect>/<random>.mp4 -> video_url. Temp files are removed on every exit path.
"""
import logging
from fastapi import APIRouter, Depends, File, UploadFile, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from tubely.auth import get_bearer_user_id, get_current_user, security
from tubely.config import Settings, get_settings
from tubely.database import get_db
from tubely.errors import BadRequestError, ForbiddenError, NotFoundError
from tubely.models.user import User
from tubely.models.video import Video
from tubely.schemas.video import VideoCreate, VideoResponse
from tubely.services.media import get_video_aspect_ratio, process_video_for_fast_start
from tubely.services.storage import ObjectStorage, get_object_storage
from tubely.services.thumbnails import ThumbnailStore, get_thumbnail_store
from tubely.services.video_upload import (
    declared_content_type,
    save_upload_to,
    temp_upload_paths,
    upload_size,
)
from tubely.utils.files import random_file_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])

VIDEO_CONTENT_TYPE = "video/mp4"


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    body: VideoCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a draft video record owned by the caller. URLs are set by later uploads."""
    title = body.title.strip()
    if not title:
        raise BadRequestError("Title is required")
    video = Video(user_id=user.id, title=title, description=(body.description or "").strip() or None)
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


@router.get("", response_model=list[VideoResponse])
def list_videos(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Video).filter(Video.user_id == user.id).order_by(Video.created_at.desc()).all()


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(video_id: str, db: Session = Depends(get_db)):
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFoundError("Couldn't find video")
    return video


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
):
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFoundError("Couldn't find video")
    if video.user_id != user.id:
        raise ForbiddenError("Current user is not the video owner")
    thumbnails.discard(video)
    db.delete(video)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{video_id}", response_model=VideoResponse)
def upload_video(
    video_id: str,
    video: UploadFile | None = File(None),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Upload the video file for an existing record (multipart field "video", video/mp4 only).
    """
    file_name = random_file_name("mp4")
    with temp_upload_paths(settings.tmp_dir, file_name) as temp_path:
        if not video_id.strip():
            raise BadRequestError("Invalid video ID")
        user_id = get_bearer_user_id(credentials)
        logger.info("Uploading video %s by user %s", video_id, user_id)

        record = db.query(Video).filter(Video.id == video_id).first()
        if not record:
            raise NotFoundError("Couldn't find video")
        if record.user_id != user_id:
            raise ForbiddenError("Current user is not the video owner")

        if video is None:
            raise BadRequestError("Couldn't get video from form data")
        if declared_content_type(video) != VIDEO_CONTENT_TYPE:
            raise BadRequestError("Wrong file type. Only video/mp4 is allowed")
        if upload_size(video) > settings.max_video_upload_bytes:
            raise BadRequestError(
                f"Video file is too big. Max {settings.max_video_upload_bytes} bytes"
            )

        save_upload_to(video, temp_path)
        timeout = settings.media_tool_timeout_seconds
        aspect_ratio = get_video_aspect_ratio(temp_path, ffprobe_bin=settings.ffprobe_bin, timeout=timeout)
        processed_path = process_video_for_fast_start(temp_path, ffmpeg_bin=settings.ffmpeg_bin, timeout=timeout)

        key = storage.upload_file(processed_path, f"{aspect_ratio}/{file_name}", VIDEO_CONTENT_TYPE)
        record.video_url = storage.public_url(key)
        db.commit()
        db.refresh(record)
        return record
