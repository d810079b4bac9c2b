"""Helpers for the video upload handler: upload size, temp files and their cleanup."""
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fastapi import UploadFile

from tubely.services.media import processed_path_for

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB


def declared_content_type(file: UploadFile) -> str:
    return (file.content_type or "").split(";")[0].strip().lower()


def upload_size(file: UploadFile) -> int:
    """Size of the received upload without reading it into memory."""
    if file.size is not None:
        return file.size
    f = file.file
    pos = f.tell()
    f.seek(0, os.SEEK_END)
    size = f.tell()
    f.seek(pos)
    return size


def save_upload_to(file: UploadFile, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    file.file.seek(0)
    with path.open("wb") as f:
        while chunk := file.file.read(CHUNK_SIZE):
            f.write(chunk)


def remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Couldn't remove temp file %s: %s", path, e)


@contextmanager
def temp_upload_paths(tmp_dir: Path | str, file_name: str) -> Iterator[Path]:
    """
    Yield <tmp_dir>/<file_name>. On exit, that file and its .processed sibling are
    removed whether or not the block raised; missing files are fine.
    """
    path = Path(tmp_dir) / file_name
    try:
        yield path
    finally:
        remove_quietly(path)
        remove_quietly(processed_path_for(path))
