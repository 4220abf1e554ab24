"""
utils/file_storage.py

Validates uploaded images and hands them to a media host, returning a
durable public URL.

- ``LocalMediaStorage`` writes to MEDIA_ROOT and serves through the /media
  static mount (development).
- ``CloudinaryMediaStorage`` uploads through the Cloudinary SDK.

Routers and services only see ``MediaStorage.upload``.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

import aiofiles
import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import DependencyError, ValidationError

log = logging.getLogger("wynngrid.media")

# ─── Accepted images ──────────────────────────────────────────────────────────

# content type -> stored file extension
IMAGE_CONTENT_TYPES = {"image/jpeg": ".jpg", "image/png": ".png"}
# file extension -> content type, for clients that send application/octet-stream
IMAGE_EXTENSIONS = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png"}


def image_kind(file: UploadFile) -> tuple[str, str]:
    """Return (content_type, extension); only JPEG and PNG are accepted."""
    content_type = (file.content_type or "").lower()
    if content_type not in IMAGE_CONTENT_TYPES:
        suffix = Path(file.filename or "").suffix.lower()
        content_type = IMAGE_EXTENSIONS.get(suffix, "")

    if not content_type:
        raise ValidationError(
            f"Unsupported file '{file.filename}'. Only JPG, JPEG and PNG images are allowed."
        )
    return content_type, IMAGE_CONTENT_TYPES[content_type]


async def read_image(file: UploadFile) -> tuple[bytes, str, str]:
    """Validate type and size; return (contents, content_type, extension)."""
    content_type, ext = image_kind(file)

    contents = await file.read()
    max_bytes = settings.MAX_IMAGE_SIZE_MB * 1024 * 1024
    if len(contents) > max_bytes:
        raise ValidationError(
            f"Image '{file.filename}' exceeds {settings.MAX_IMAGE_SIZE_MB}MB limit."
        )
    if not contents:
        raise ValidationError(f"Image '{file.filename}' is empty.")
    return contents, content_type, ext


def real_files(files) -> list[UploadFile]:
    """Drop empty form parts some clients send for an untouched file input."""
    return [f for f in (files or []) if f is not None and f.filename]


# ─── Storage backends ─────────────────────────────────────────────────────────

class MediaStorage(ABC):

    @abstractmethod
    async def upload(self, file: UploadFile, folder: str) -> str:
        """Store one image and return its public URL."""

    async def upload_many(self, files: list[UploadFile], folder: str) -> list[str]:
        """Upload in order and return URLs in the same order."""
        urls = []
        for f in files:
            url = await self.upload(f, folder)
            urls.append(url)
        return urls


class LocalMediaStorage(MediaStorage):

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def upload(self, file: UploadFile, folder: str) -> str:
        contents, _content_type, ext = await read_image(file)

        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{uuid.uuid4().hex}{ext}"
        async with aiofiles.open(target_dir / filename, "wb") as out:
            await out.write(contents)

        return f"{self.base_url}/media/{folder}/{filename}"


class CloudinaryMediaStorage(MediaStorage):

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    async def upload(self, file: UploadFile, folder: str) -> str:
        contents, _content_type, _ext = await read_image(file)

        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload, contents, folder=folder, resource_type="image",
            )
        except cloudinary.exceptions.Error as e:
            log.error("Cloudinary upload failed: %s", e)
            raise DependencyError("Image upload failed") from e

        return result["secure_url"]


@lru_cache
def get_media_storage() -> MediaStorage:
    if settings.MEDIA_BACKEND == "cloudinary":
        return CloudinaryMediaStorage(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )
    return LocalMediaStorage(settings.MEDIA_ROOT, settings.BASE_URL)
