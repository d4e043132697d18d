"""Storage for uploaded product images (local disk or S3)."""
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.errors import AppError, ErrorKind
from app.utils.ids import epoch_millis, random_suffix

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class ImageStorage:
    """Validates an upload and hands back the public URL of the stored file."""

    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

    def __init__(self, max_size: int):
        self.max_size = max_size

    @classmethod
    def is_supported(cls, filename: str) -> bool:
        return Path(filename or "").suffix.lower() in cls.SUPPORTED_EXTENSIONS

    @staticmethod
    def make_filename(original: str) -> str:
        return f"product-{epoch_millis()}-{random_suffix()}{Path(original).suffix.lower()}"

    async def save(self, upload: UploadFile) -> str:
        if not self.is_supported(upload.filename):
            raise AppError(ErrorKind.VALIDATION, "Only image files are allowed!")

        content = await self._read_limited(upload)

        filename = self.make_filename(upload.filename)
        url = await self._store(filename, content, upload.content_type)
        logger.info("Stored image %s (%d bytes)", filename, len(content))
        return url

    async def _read_limited(self, upload: UploadFile) -> bytes:
        """Read the upload in chunks, stopping as soon as it passes ``max_size``."""
        chunks = []
        size = 0
        while True:
            chunk = await upload.read(min(CHUNK_SIZE, self.max_size + 1 - size))
            if not chunk:
                break
            size += len(chunk)
            if size > self.max_size:
                raise AppError(
                    ErrorKind.UPLOAD_TOO_LARGE,
                    f"Image exceeds the {self.max_size // (1024 * 1024)}MB limit",
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def _store(self, filename: str, content: bytes, content_type: Optional[str]) -> str:
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    def __init__(self, upload_dir: str, url_prefix: str, max_size: int):
        super().__init__(max_size)
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    async def _store(self, filename, content, content_type):
        async with aiofiles.open(self.upload_dir / filename, "wb") as buffer:
            await buffer.write(content)
        return f"{self.url_prefix}/{filename}"


class S3ImageStorage(ImageStorage):
    def __init__(self, bucket: str, prefix: str, region: str, max_size: int, client=None):
        super().__init__(max_size)
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self.client = client or boto3.client("s3", region_name=region)

    async def _store(self, filename, content, content_type):
        key = f"{self.prefix}{filename}"
        await run_in_threadpool(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type or "application/octet-stream",
        )
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def build_image_storage(settings: Settings) -> ImageStorage:
    if settings.S3_BUCKET:
        return S3ImageStorage(
            bucket=settings.S3_BUCKET,
            prefix=settings.S3_PREFIX,
            region=settings.AWS_REGION,
            max_size=settings.MAX_UPLOAD_SIZE,
        )
    return LocalImageStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX, settings.MAX_UPLOAD_SIZE)
