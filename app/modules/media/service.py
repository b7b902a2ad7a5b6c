"""
Cloudinary image hosting.

Uploads go straight to Cloudinary's unsigned upload endpoint with the
configured upload preset; the returned secure_url is what gets stored on
profiles.
"""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from app.config.settings import settings

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

_GOOGLE_AVATAR_SIZE = re.compile(r"=s\d+-c")

_AVATAR_KEYS = ("picture", "avatar_url", "photoURL", "image", "profile_picture")


class MediaUploadError(Exception):
    pass


def extract_google_avatar(user_metadata: Optional[Dict[str, Any]]) -> Optional[str]:
    """First avatar URL found in OAuth user metadata, upgraded to a 400px Google image."""
    if not user_metadata:
        return None

    candidates = [user_metadata.get(key) for key in _AVATAR_KEYS]
    for nested in ("provider_id", "google"):
        value = user_metadata.get(nested)
        if isinstance(value, dict):
            candidates.extend(value.get(key) for key in ("picture", "avatar_url", "photoURL"))

    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            avatar_url = candidate.strip()
            if "lh3.googleusercontent.com" in avatar_url and "=s" in avatar_url:
                avatar_url = _GOOGLE_AVATAR_SIZE.sub("=s400-c", avatar_url, count=1)
            return avatar_url
    return None


class CloudinaryService:
    def __init__(self, http_client: Optional[httpx.Client] = None):
        self.http_client = http_client or httpx.Client(timeout=30.0)
        self.cloud_name = settings.cloudinary_cloud_name
        self.upload_preset = settings.cloudinary_upload_preset

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name)

    def upload_image(self, content: bytes, filename: str = "upload.jpg", content_type: str = "image/jpeg") -> str:
        """Upload image bytes and return the hosted secure_url"""
        if not self.is_configured:
            raise MediaUploadError("Cloudinary cloud name is not configured")
        try:
            response = self.http_client.post(
                CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name),
                data={
                    "upload_preset": self.upload_preset,
                    "cloud_name": self.cloud_name,
                    "quality": "auto",
                    "format": "auto",
                },
                files={"file": (filename, content, content_type)},
            )
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error uploading image to Cloudinary: {e}")
            raise MediaUploadError(f"Upload failed: {e}")

        secure_url = body.get("secure_url") if isinstance(body, dict) else None
        if not secure_url:
            logger.error(f"Cloudinary upload returned no secure_url: {body}")
            raise MediaUploadError("Upload failed")
        return secure_url

    def upload_image_from_url(self, image_url: str) -> str:
        """Mirror a remote image (e.g. a Google profile picture) to Cloudinary"""
        try:
            response = self.http_client.get(image_url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching image {image_url}: {e}")
            raise MediaUploadError(f"Failed to fetch image: {e}")
        if response.status_code >= 400:
            raise MediaUploadError(f"Failed to fetch image: {response.status_code}")
        return self.upload_image(response.content, filename="google-profile.jpg")

    def close(self):
        self.http_client.close()


def get_media_service():
    service = CloudinaryService()
    try:
        yield service
    finally:
        service.close()
