"""
Image attachment storage for posts.

Uploads are validated and written to ``settings.UPLOAD_DIR`` before the
owning post row is persisted; the returned ``/uploads/<name>`` reference
is what gets stored on the post and served by the static mount in
``app.main``.
"""
import logging
import re
import uuid
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.errors import ValidationError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"

_ALLOWED_TYPES_RE = re.compile(r"jpeg|jpg|png|gif")


def is_allowed_image(filename: str, content_type: str | None) -> bool:
    """Both the extension and the declared MIME type must name an image format."""
    extension = Path(filename or "").suffix.lower()
    return bool(
        extension
        and _ALLOWED_TYPES_RE.search(extension)
        and _ALLOWED_TYPES_RE.search(content_type or "")
    )


def has_file(upload: UploadFile | None) -> bool:
    # Browsers submit an empty part with no filename when no file was picked.
    return upload is not None and bool(upload.filename)


def _write(target_dir: Path, name: str, data: bytes) -> None:
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / name).write_bytes(data)


async def store_image(upload: UploadFile) -> str:
    """Persist *upload* and return its public reference path."""
    if not is_allowed_image(upload.filename, upload.content_type):
        raise ValidationError("Only image files are allowed")

    limit = settings.MAX_UPLOAD_BYTES
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise ValidationError(f"Image exceeds the {limit // (1024 * 1024)} MB limit")

    name = f"image-{uuid.uuid4().hex}{Path(upload.filename).suffix.lower()}"
    await run_in_threadpool(_write, Path(settings.UPLOAD_DIR), name, data)

    logger.info("Stored upload %r as %s (%d bytes)", upload.filename, name, len(data))
    return f"{URL_PREFIX}/{name}"


async def discard_image(reference: str) -> None:
    """Remove a file stored by ``store_image`` whose row was never written."""
    name = reference.rsplit("/", 1)[-1]
    path = Path(settings.UPLOAD_DIR) / name
    await run_in_threadpool(path.unlink, missing_ok=True)
    logger.info("Discarded upload %s", name)
