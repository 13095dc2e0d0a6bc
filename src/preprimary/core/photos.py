"""Student photo hosting on Cloudinary.

Uses the official ``cloudinary`` SDK for signed upload and deletion.

Usage:
    client = CloudinaryClient.from_config()
    photo = client.upload(data, content_type="image/jpeg")
    client.destroy(photo.public_id)
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import cloudinary.exceptions
import cloudinary.uploader
import structlog

from preprimary.config.app_config import PhotoConfig, load_app_config

logger = structlog.get_logger(__name__)

# Square thumbnail applied on upload
UPLOAD_TRANSFORMATION = [{"width": 200, "height": 200, "crop": "fill"}]


class PhotoError(Exception):
    """Base error for photo handling."""

    pass


class PhotoConfigError(PhotoError):
    """Cloudinary credentials are not configured."""

    pass


class InvalidPhotoError(PhotoError):
    """Upload rejected before reaching Cloudinary."""

    pass


class PhotoTooLargeError(InvalidPhotoError):
    pass


class UnsupportedPhotoTypeError(InvalidPhotoError):
    pass


class PhotoUploadError(PhotoError):
    """Cloudinary rejected the request or could not be reached."""

    pass


@dataclass
class UploadedPhoto:
    """Result of a successful upload."""

    url: str
    public_id: str
    width: int | None = None
    height: int | None = None


def validate_upload(content_type: str | None, size: int, config: PhotoConfig) -> None:
    """Check type and size limits for a photo.

    Raises:
        UnsupportedPhotoTypeError: If content_type is not an allowed image type
        PhotoTooLargeError: If size exceeds config.max_bytes
    """
    if not content_type or content_type not in config.allowed_types:
        raise UnsupportedPhotoTypeError(
            f"Unsupported photo type '{content_type}'. "
            f"Allowed: {', '.join(config.allowed_types)}"
        )
    if size > config.max_bytes:
        raise PhotoTooLargeError(
            f"Photo is {size} bytes; the limit is {config.max_bytes} bytes"
        )
    if size == 0:
        raise InvalidPhotoError("Photo file is empty")


class CloudinaryClient:
    """Upload and delete student photos through the Cloudinary SDK.

    Credentials are passed on every call instead of through the SDK's
    global ``cloudinary.config``, so two clients never share state.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "students"):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self._api_secret = api_secret
        self.folder = folder

    @classmethod
    def from_config(cls, config: PhotoConfig | None = None) -> CloudinaryClient:
        """Build a client from environment credentials.

        Raises:
            PhotoConfigError: If any credential variable is unset
        """
        config = config or load_app_config().photos
        credentials = config.get_credentials()
        if credentials is None:
            raise PhotoConfigError("Cloudinary API credentials not configured")

        cloud_name, api_key, api_secret = credentials
        return cls(cloud_name, api_key, api_secret, folder=config.folder)

    def _account(self) -> dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self._api_secret,
        }

    def upload(
        self, data: bytes, content_type: str = "image/jpeg", filename: str = "photo"
    ) -> UploadedPhoto:
        """Upload an image into the configured folder.

        Raises:
            PhotoUploadError: If Cloudinary rejects the upload or is unreachable
        """
        try:
            result = cloudinary.uploader.upload(
                BytesIO(data),
                folder=self.folder,
                transformation=UPLOAD_TRANSFORMATION,
                resource_type="image",
                filename=filename,
                **self._account(),
            )
        except cloudinary.exceptions.Error as e:
            raise PhotoUploadError(f"Cloudinary upload failed: {e}") from e

        logger.info(
            "photos.uploaded",
            public_id=result.get("public_id"),
            content_type=content_type,
            bytes=len(data),
        )
        return UploadedPhoto(
            url=result["secure_url"],
            public_id=result["public_id"],
            width=result.get("width"),
            height=result.get("height"),
        )

    def destroy(self, public_id: str) -> bool:
        """Delete an image. Returns True if Cloudinary removed it."""
        try:
            result = cloudinary.uploader.destroy(public_id, **self._account())
        except cloudinary.exceptions.Error as e:
            raise PhotoUploadError(f"Cloudinary destroy failed: {e}") from e

        removed = result.get("result") == "ok"
        logger.info("photos.destroyed", public_id=public_id, removed=removed)
        return removed
