import logging
import os
import shutil
import tempfile
import uuid
from functools import lru_cache
from typing import Awaitable, Callable

from fastapi import UploadFile, status
from imagekitio import ImageKit
from imagekitio.models.UploadFileRequestOptions import UploadFileRequestOptions
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import AppError


logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}

MediaUploader = Callable[[UploadFile, int], Awaitable[str]]


# -----------------------------
# ImageKit Client
# -----------------------------
@lru_cache(maxsize=1)
def get_imagekit() -> ImageKit:
    return ImageKit(
        private_key=settings.IMAGEKIT_PRIVATE_KEY,
        public_key=settings.IMAGEKIT_PUBLIC_KEY,
        url_endpoint=settings.IMAGEKIT_URL_ENDPOINT,
    )


# -----------------------------
# Shared Helpers
# -----------------------------
def _validate_extension(filename: str, allowed: set) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
    if ext not in allowed:
        raise AppError(f"Invalid file type. Allowed: {', '.join(sorted(allowed))}")
    return ext


def _validate_size(file: UploadFile, limit: int) -> int:
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)

    if size > limit:
        raise AppError(f"Image too large (max {limit // (1024 * 1024)}MB)")
    return size


async def _upload_via_tempfile(
    file: UploadFile,
    filename: str,
    folder: str,
    tags: list,
) -> str:
    """
    Spools the upload to disk and pushes it to ImageKit off the event loop.
    """
    temp_path = None

    try:
        with tempfile.NamedTemporaryFile(delete=False) as tmp:
            shutil.copyfileobj(file.file, tmp)
            temp_path = tmp.name

        def sync_upload():
            with open(temp_path, "rb") as f:
                return get_imagekit().upload_file(
                    file=f,
                    file_name=filename,
                    options=UploadFileRequestOptions(
                        folder=f"/{folder}/",
                        use_unique_file_name=True,
                        is_private_file=False,
                        tags=tags,
                    ),
                )

        response = await run_in_threadpool(sync_upload)

        if not response or not getattr(response, "url", None):
            raise ValueError("Invalid ImageKit response")

        return response.url

    except AppError:
        raise

    except Exception as e:
        logger.error("Image upload failed: %s", e)
        raise AppError(f"Upload failed: {e}", status.HTTP_502_BAD_GATEWAY) from e

    finally:
        if temp_path and os.path.exists(temp_path):
            os.unlink(temp_path)


# -----------------------------
# Message Image Upload
# -----------------------------
async def upload_message_image(file: UploadFile, uploader_id: int) -> str:
    """
    Validate and upload an image attached to a direct message.
    Returns the public URL stored as the message's media_url.
    """
    ext = _validate_extension(file.filename, ALLOWED_IMAGE_EXTENSIONS)
    _validate_size(file, settings.MAX_IMAGE_SIZE)

    filename = f"dm_{uploader_id}_{uuid.uuid4()}.{ext}"

    return await _upload_via_tempfile(
        file=file,
        filename=filename,
        folder="dm_images",
        tags=["direct_message", "image"],
    )


def get_media_uploader() -> MediaUploader:
    return upload_message_image
