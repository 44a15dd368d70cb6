"""
Profile picture storage on S3, served through CloudFront.
"""
import logging
import os
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from myumc.services.errors import ServiceError

logger = logging.getLogger(__name__)

_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


class StorageError(ServiceError):
    """Object storage rejected or failed an upload."""


class StorageSettings:
    """S3/CloudFront configuration from environment variables."""

    def __init__(self):
        self.bucket = os.getenv("PROFILE_PICTURES_BUCKET", "")
        self.cdn_domain = os.getenv("CLOUDFRONT_DOMAIN", "")
        self.region = os.getenv("AWS_REGION", "us-east-1")
        self.endpoint_url = os.getenv("S3_ENDPOINT_URL") or None

    def validate(self) -> None:
        if not self.bucket:
            raise ValueError("PROFILE_PICTURES_BUCKET is not configured")
        if not self.cdn_domain:
            raise ValueError("CLOUDFRONT_DOMAIN is not configured")


def content_type_for(file_name: str) -> str:
    ext = os.path.splitext(file_name)[1].lower()
    return _CONTENT_TYPES.get(ext, "application/octet-stream")


class ProfileStorageService:
    """Uploads profile pictures under ``profiles/`` and returns their CDN URL."""

    def __init__(self, client=None, settings: Optional[StorageSettings] = None):
        self.settings = settings or StorageSettings()
        self.settings.validate()
        self.client = client or boto3.client(
            "s3",
            region_name=self.settings.region,
            endpoint_url=self.settings.endpoint_url,
        )

    def upload_profile_picture(self, data: bytes, file_name: str) -> str:
        key = f"profiles/{file_name}"
        try:
            self.client.put_object(
                Bucket=self.settings.bucket,
                Key=key,
                Body=data,
                ContentType=content_type_for(file_name),
                ACL="private",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Failed to upload %s to bucket %s", key, self.settings.bucket)
            raise StorageError("Failed to upload profile picture") from exc
        logger.info("Uploaded profile picture %s", key)
        return f"https://{self.settings.cdn_domain}/{key}"
