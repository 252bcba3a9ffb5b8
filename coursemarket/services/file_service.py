import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from coursemarket.config import settings
from coursemarket.core.exceptions import InvalidUpload, UpstreamFailure
from coursemarket.utils.path_helpers import get_file_url, is_safe_path, sanitize_filename

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Where uploaded course files end up. Returns the public URL of the object."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        ...


class LocalObjectStorage(ObjectStorage):
    def __init__(self, base_dir: str = None, base_url: str = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.base_url = base_url if base_url is not None else settings.UPLOAD_BASE_URL
        self.base_dir.mkdir(parents=True, exist_ok=True)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        file_path = self.base_dir / key
        if not is_safe_path(str(self.base_dir), str(file_path)):
            raise InvalidUpload("Invalid file name")

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as out_file:
                await out_file.write(data)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            raise UpstreamFailure("Failed to upload file") from e

        return get_file_url(key, self.base_url)


def validate_upload(content_type: Optional[str], size: Optional[int]) -> None:
    """Reject a file before anything is written"""
    if content_type not in settings.ALLOWED_UPLOAD_TYPES:
        raise InvalidUpload("Invalid file type")

    if size is not None and size > settings.MAX_UPLOAD_SIZE:
        raise InvalidUpload("File too large")


def build_object_key(course_id: int, filename: str) -> str:
    return f"courses/{course_id}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"


async def store_course_file(storage: ObjectStorage, upload_file: UploadFile, course_id: int) -> str:
    """
    Validate an uploaded file and write it to object storage.

    Returns the URL of the stored object.
    """
    validate_upload(upload_file.content_type, upload_file.size)

    # Read one byte past the limit so oversized bodies without a size are caught
    data = await upload_file.read(settings.MAX_UPLOAD_SIZE + 1)
    validate_upload(upload_file.content_type, len(data))

    key = build_object_key(course_id, upload_file.filename)
    url = await storage.put(key, data, upload_file.content_type)
    logger.info(f"Stored {len(data)} bytes for course {course_id} at {key}")
    return url


_object_storage: Optional[ObjectStorage] = None


def get_object_storage() -> ObjectStorage:
    global _object_storage
    if _object_storage is None:
        _object_storage = LocalObjectStorage()
    return _object_storage
