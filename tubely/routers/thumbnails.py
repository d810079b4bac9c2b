"""
Thumbnail upload (owner only) and fetch (public). Where the bytes live depends on
settings.thumbnail_storage; see services/thumbnails.py.
"""
import logging
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from tubely.auth import get_bearer_user_id, security
from tubely.config import Settings, get_settings
from tubely.database import get_db
from tubely.errors import BadRequestError, ForbiddenError, NotFoundError
from tubely.models.video import Video
from tubely.schemas.video import VideoResponse
from tubely.services.thumbnails import ThumbnailStore, get_thumbnail_store
from tubely.services.video_upload import declared_content_type, upload_size

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/thumbnails", tags=["thumbnails"])

THUMBNAIL_CONTENT_TYPES = {"image/jpeg", "image/png"}


@router.get("/{video_id}")
def get_thumbnail(
    video_id: str,
    db: Session = Depends(get_db),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
):
    if not video_id.strip():
        raise BadRequestError("Invalid video ID")
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFoundError("Couldn't find video")
    thumbnail = thumbnails.load(video)
    if not thumbnail:
        raise NotFoundError("Thumbnail not found")
    return Response(
        content=thumbnail.data,
        media_type=thumbnail.media_type,
        headers={"Cache-Control": "no-store"},
    )


@router.post("/{video_id}", response_model=VideoResponse)
def upload_thumbnail(
    video_id: str,
    thumbnail: UploadFile | None = File(None),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    thumbnails: ThumbnailStore = Depends(get_thumbnail_store),
    settings: Settings = Depends(get_settings),
):
    """Upload a JPEG/PNG thumbnail (multipart field "thumbnail", max 10 MB by default)."""
    if not video_id.strip():
        raise BadRequestError("Invalid video ID")
    user_id = get_bearer_user_id(credentials)
    logger.info("Uploading thumbnail for video %s by user %s", video_id, user_id)

    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFoundError("Couldn't find video")
    if thumbnail is None:
        raise BadRequestError("Couldn't get thumbnail from form data")
    media_type = declared_content_type(thumbnail)
    if media_type not in THUMBNAIL_CONTENT_TYPES:
        raise BadRequestError("Thumbnail must be image/jpeg or image/png")
    if upload_size(thumbnail) > settings.max_thumbnail_upload_bytes:
        raise BadRequestError(
            f"Thumbnail file is too big. Max {settings.max_thumbnail_upload_bytes} bytes"
        )
    if video.user_id != user_id:
        raise ForbiddenError("Current user is not the video owner")

    thumbnail.file.seek(0)
    data = thumbnail.file.read()
    video.thumbnail_url = thumbnails.save(video, data, media_type)
    db.commit()
    db.refresh(video)
    return video
