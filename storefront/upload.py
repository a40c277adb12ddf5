# storefront/upload.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from .auth import require_upload_admin
from .errors import MissingFieldsError, UpstreamError
from .media import MediaHostClient, get_media_client
from .schemas import UploadOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"], dependencies=[Depends(require_upload_admin)])


async def _read(file: Optional[UploadFile]) -> bytes:
    if file is None:
        raise MissingFieldsError("No file provided")
    content = await file.read()
    if not content:
        raise MissingFieldsError("No file provided")
    return content


@router.post("", response_model=UploadOut)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    media: MediaHostClient = Depends(get_media_client),
):
    content = await _read(file)
    image = await media.upload(file.filename, content, file.content_type)
    logger.info("Uploaded image %s", image.public_id)
    return UploadOut(url=image.url, public_id=image.public_id)


@router.put("", response_model=UploadOut)
async def replace_image(
    file: Optional[UploadFile] = File(None),
    public_id: Optional[str] = Form(None),
    media: MediaHostClient = Depends(get_media_client),
):
    """Upload a replacement, then delete the previous asset.

    The old image is only removed once the new one is stored, so a failed
    upload never loses it. A failed delete leaves an orphan on the host and
    still returns the new image.
    """
    content = await _read(file)
    image = await media.upload(file.filename, content, file.content_type)

    if public_id:
        try:
            await media.destroy(public_id)
        except UpstreamError:
            logger.warning("New image %s stored but old image %s could not be deleted", image.public_id, public_id)

    return UploadOut(url=image.url, public_id=image.public_id)
