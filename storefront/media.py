# storefront/media.py
"""Client for the image host (Cloudinary).

Images are stored and transformed by the host; we only relay bytes and keep
the returned ``secure_url`` / ``public_id`` pair. The Cloudinary SDK is
synchronous, so every call runs in the threadpool.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class UploadedImage:
    url: str
    public_id: str


class MediaHostClient:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: Optional[str] = "products"):
        self.cloud_name = cloud_name
        self.folder = folder
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediaHostClient":
        if not (settings.cloudinary_cloud_name and settings.cloudinary_api_key and settings.cloudinary_api_secret):
            raise UpstreamError("Media host is not configured")
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> UploadedImage:
        try:
            body = await run_in_threadpool(
                cloudinary.uploader.upload,
                content,
                folder=self.folder,
                filename=filename or "upload",
                resource_type="image",
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("Media host upload of %s (%s) failed: %s", filename, content_type, exc)
            raise UpstreamError("Media host upload failed") from exc

        try:
            return UploadedImage(url=body["secure_url"], public_id=body["public_id"])
        except KeyError as exc:
            raise UpstreamError("Media host returned an unexpected upload response") from exc

    async def destroy(self, public_id: str) -> None:
        try:
            body = await run_in_threadpool(cloudinary.uploader.destroy, public_id)
        except cloudinary.exceptions.Error as exc:
            logger.error("Media host destroy of %s failed: %s", public_id, exc)
            raise UpstreamError("Media host destroy failed") from exc

        # "not found" is fine: the asset is already gone
        if body.get("result") not in ("ok", "not found"):
            raise UpstreamError(f"Media host refused to delete {public_id}")
        logger.info("Deleted media asset %s", public_id)


async def get_media_client(request: Request) -> MediaHostClient:
    return MediaHostClient.from_settings(request.app.state.settings)
