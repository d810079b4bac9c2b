"""
Thumbnail stores. One instance is created at startup (see main.lifespan) and shared by
all requests through app.state.

- MemoryThumbnailStore: bytes kept in process memory, keyed by video id. Lost on restart.
- DiskThumbnailStore: files under assets_root named <random>.<ext>; the video's
  thumbnail_url is the only link to the file.
"""
import logging
import mimetypes
import threading
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from fastapi import Request

from tubely.config import Settings
from tubely.models.video import Video
from tubely.utils.files import random_file_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Thumbnail:
    data: bytes
    media_type: str


def extension_for_media_type(media_type: str) -> str:
    # image/png -> png, image/jpeg -> jpeg
    _, _, subtype = media_type.partition("/")
    return subtype or "bin"


class MemoryThumbnailStore:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self._thumbnails: dict[str, Thumbnail] = {}
        self._lock = threading.Lock()

    def save(self, video: Video, data: bytes, media_type: str) -> str:
        with self._lock:
            self._thumbnails[video.id] = Thumbnail(data=data, media_type=media_type)
        return f"{self.base_url}/api/thumbnails/{video.id}"

    def load(self, video: Video) -> Thumbnail | None:
        with self._lock:
            return self._thumbnails.get(video.id)

    def discard(self, video: Video) -> None:
        with self._lock:
            self._thumbnails.pop(video.id, None)


class DiskThumbnailStore:
    def __init__(self, assets_root: Path | str, base_url: str):
        self.assets_root = Path(assets_root)
        self.base_url = base_url.rstrip("/")

    def _path_from_url(self, url: str | None) -> Path | None:
        """Resolve the file named by a thumbnail URL. None if it escapes assets_root."""
        if not url:
            return None
        name = Path(urlparse(url).path).name
        if not name:
            return None
        root = self.assets_root.resolve()
        try:
            path = (root / name).resolve()
            path.relative_to(root)
        except (ValueError, OSError):
            return None
        return path

    def save(self, video: Video, data: bytes, media_type: str) -> str:
        self.assets_root.mkdir(parents=True, exist_ok=True)
        file_name = random_file_name(extension_for_media_type(media_type))
        (self.assets_root / file_name).write_bytes(data)
        # Old file is unreachable once the URL changes
        self.discard(video)
        return f"{self.base_url}/assets/{file_name}"

    def load(self, video: Video) -> Thumbnail | None:
        path = self._path_from_url(video.thumbnail_url)
        if path is None or not path.is_file():
            return None
        media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return Thumbnail(data=path.read_bytes(), media_type=media_type)

    def discard(self, video: Video) -> None:
        path = self._path_from_url(video.thumbnail_url)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Couldn't remove old thumbnail %s: %s", path, e)


ThumbnailStore = MemoryThumbnailStore | DiskThumbnailStore


def build_thumbnail_store(settings: Settings) -> ThumbnailStore:
    base_url = f"http://localhost:{settings.port}"
    if settings.thumbnail_storage == "disk":
        return DiskThumbnailStore(settings.assets_root, base_url)
    if settings.thumbnail_storage != "memory":
        raise ValueError(f"Unknown thumbnail_storage: {settings.thumbnail_storage}. Valid: memory, disk")
    return MemoryThumbnailStore(base_url)


def get_thumbnail_store(request: Request) -> ThumbnailStore:
    return request.app.state.thumbnail_store
