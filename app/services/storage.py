import mimetypes
import os
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from app.core.config import get_settings

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "application/octet-stream"}


def ensure_media_dir(subdir: str = "") -> Path:
    settings = get_settings()
    root = Path(settings.media_dir) / subdir if subdir else Path(settings.media_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


def media_url(path: Path) -> str:
    settings = get_settings()
    relative = path.relative_to(Path(settings.media_dir)).as_posix()
    return f"{settings.media_url_prefix.rstrip('/')}/{relative}"


def resolve_media_path(url: str) -> Path | None:
    """Map a URL served from the media mount back to the stored file."""
    settings = get_settings()
    prefix = settings.media_url_prefix.rstrip("/") + "/"
    if not url.startswith(prefix):
        return None
    candidate = (Path(settings.media_dir) / url[len(prefix):]).resolve()
    root = Path(settings.media_dir).resolve()
    if root not in candidate.parents:
        return None
    return candidate


def save_generated_image(data: bytes, mime_type: str = "image/png") -> str:
    ext = mimetypes.guess_extension(mime_type) or ".png"
    root = ensure_media_dir("generated")
    final_path = root / f"{uuid.uuid4()}{ext}"
    final_path.write_bytes(data)
    return media_url(final_path)


async def save_garment_upload(file: UploadFile) -> str:
    settings = get_settings()
    ext = Path(file.filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid image extension: {ext or 'none'}")
    if file.content_type not in IMAGE_CONTENT_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid content type: {file.content_type}")

    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    root = ensure_media_dir("garments")
    final_path = root / f"{uuid.uuid4()}{ext}"

    total = 0
    with final_path.open("wb") as handle:
        while True:
            chunk = await file.read(1024 * 1024)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                handle.close()
                os.remove(final_path)
                raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File exceeds max size")
            handle.write(chunk)
    await file.close()
    return media_url(final_path)


def delete_media_if_exists(url: str | None) -> None:
    if not url:
        return
    path = resolve_media_path(url)
    if path is not None and path.exists():
        path.unlink(missing_ok=True)
