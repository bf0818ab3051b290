import logging
import os
import tempfile
import uuid

from fastapi import HTTPException, UploadFile, status

import config
from schemas.upload import UploadedImage
from storage.base import BaseStorage, StorageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def store_image(storage: BaseStorage, file: UploadFile, folder: str) -> UploadedImage:
    """Validates an uploaded image and hands it to the image host.

    The upload is spooled into a temporary file that is removed once the
    host call returns, whether it succeeded or not.
    """
    if not file or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    if file.content_type not in config.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type. Upload only images (JPEG, PNG, GIF, WEBP).",
        )

    extension = os.path.splitext(file.filename)[1].lower()
    filename = f"{uuid.uuid4()}{extension}"
    max_mb = config.MAX_UPLOAD_SIZE // (1024 * 1024)

    with tempfile.NamedTemporaryFile(suffix=extension) as tmp:
        size = 0
        while True:
            chunk = file.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > config.MAX_UPLOAD_SIZE:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"File is too large. Maximum {max_mb}MB.",
                )
            tmp.write(chunk)
        tmp.flush()
        tmp.seek(0)

        try:
            url = storage.save(tmp, filename, folder=folder, content_type=file.content_type)
        except StorageError:
            logger.exception("Upload of %s to folder %s failed", file.filename, folder)
            raise

    logger.info("Stored image %s (%s bytes) in %s", filename, size, folder)
    return UploadedImage(url=url, public_id=storage.public_id_from_url(url))


def delete_image(storage: BaseStorage, public_id: str) -> None:
    if not public_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Public ID not provided")

    if not storage.delete(public_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unable to delete the image")
    logger.info("Deleted image %s", public_id)


def discard_image(storage: BaseStorage, file_url: str | None) -> None:
    """Best-effort removal of an image we stored earlier; foreign URLs are left alone."""
    if not file_url:
        return
    public_id = storage.public_id_from_url(file_url)
    if not public_id:
        return
    try:
        storage.delete(public_id)
    except StorageError as e:
        logger.warning("Could not remove stored image %s: %s", public_id, e)
